"""
catalog.py - The fixed set of DICOM tags read for a protocol summary.

The catalog is an ordered list of (code, name) pairs.  Codes are written the
way dcmdump prints them ("gggg,eeee", lower-case hex) and names double as
the keys of the parsed tag map and as placeholders in SUMMARY_TEMPLATE.

Two Siemens private tags are kept apart from the main header dump because
they are dumped on their own:

- (0019,1029) MosaicRefAcqTimes: per-slice acquisition times of a mosaic,
  used to infer slice count, slice order and multiband factor.
- (0051,1011) ImaPATModeText: parallel imaging mode, e.g. "p2".
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from pydicom.tag import BaseTag, Tag

_CODE_RE = re.compile(r"^\(?([0-9A-Fa-f]{4}),?([0-9A-Fa-f]{4})\)?$")


def tag_from_code(code: str) -> BaseTag:
    """
    Parse a tag code into a pydicom tag.

    Accepts "gggg,eeee", "(gggg,eeee)" and "ggggeeee".

    Raises
    ------
    ValueError
        If *code* is not a tag code.
    """
    match = _CODE_RE.match(code.strip())
    if match is None:
        raise ValueError(f"Not a DICOM tag code: {code!r}")
    return Tag(int(match.group(1), 16), int(match.group(2), 16))


def format_tag(tag: BaseTag) -> str:
    """Render *tag* the way dcmdump prints it, without parentheses."""
    return f"{tag.group:04x},{tag.element:04x}"


@dataclass(frozen=True)
class TagDefinition:
    """One catalog entry: a tag code and the name it is reported under."""
    code: str
    name: str

    @property
    def tag(self) -> BaseTag:
        return tag_from_code(self.code)

    @property
    def is_private(self) -> bool:
        return self.tag.is_private


# ---------------------------------------------------------------------------
# Tag list
# ---------------------------------------------------------------------------

SLICE_TIMES_TAG = TagDefinition("0019,1029", "MosaicRefAcqTimes")
PAT_MODE_TAG = TagDefinition("0051,1011", "ImaPATModeText")

TAG_CATALOG: tuple[TagDefinition, ...] = (
    TagDefinition("0008,0070", "Manufacturer"),
    TagDefinition("0008,1090", "ManufacturerModelName"),
    TagDefinition("0018,0087", "MagneticFieldStrength"),
    TagDefinition("0018,0020", "ScanningSequence"),
    TagDefinition("0018,0024", "SequenceName"),
    TagDefinition("0018,0080", "RepetitionTime"),
    TagDefinition("0018,0081", "EchoTime"),
    TagDefinition("0018,1314", "FlipAngle"),
    TagDefinition("0018,0050", "SliceThickness"),
    TagDefinition("0018,0088", "SpacingBetweenSlices"),
    TagDefinition("0028,0030", "PixelSpacing"),
    TagDefinition("0018,1310", "AcquisitionMatrix"),
    TagDefinition("0018,1312", "InPlanePhaseEncodingDirection"),
    TagDefinition("0018,0089", "NumberOfPhaseEncodingSteps"),
    TagDefinition("0018,0091", "EchoTrainLength"),
    TagDefinition("0018,0095", "PixelBandwidth"),
    SLICE_TIMES_TAG,
    PAT_MODE_TAG,
)

# Keys added to the tag map by the inference step.
DERIVED_KEYS: tuple[str, ...] = (
    "NumberOfSlices",
    "SliceOrder",
    "SliceAccelerationFactor",
    "InplaneAccelerationFactor",
    "SliceGap",
    "NumberOfVolumes",
    "PEDirection",
    "InplaneResolution",
    "InplaneMatrixSize",
)

SUMMARY_TEMPLATE = (
    "Images were acquired on a MagneticFieldStrength T Manufacturer "
    "ManufacturerModelName scanner using a SequenceName (ScanningSequence) "
    "sequence with the following parameters: "
    "TR = RepetitionTime ms, TE = EchoTime ms, flip angle = FlipAngle deg, "
    "NumberOfSlices slices acquired in SliceOrder order, "
    "slice thickness = SliceThickness mm, slice gap = SliceGap mm, "
    "in-plane resolution = InplaneResolution mm, "
    "matrix size = InplaneMatrixSize, "
    "phase encoding direction = PEDirection, "
    "bandwidth = PixelBandwidth Hz/px, "
    "in-plane acceleration factor = InplaneAccelerationFactor (ImaPATModeText), "
    "slice acceleration factor = SliceAccelerationFactor, "
    "NumberOfVolumes volumes."
)


def validate_catalog(catalog: Iterable[TagDefinition]) -> None:
    """
    Check that codes and names are unique and codes parse.

    Raises
    ------
    ValueError
        On a malformed code or a duplicated code or name.
    """
    codes: set[BaseTag] = set()
    names: set[str] = set()
    for entry in catalog:
        tag = entry.tag
        if tag in codes:
            raise ValueError(f"Duplicate tag code in catalog: {entry.code}")
        if entry.name in names:
            raise ValueError(f"Duplicate tag name in catalog: {entry.name}")
        codes.add(tag)
        names.add(entry.name)


def header_tags(catalog: Iterable[TagDefinition] = TAG_CATALOG) -> list[TagDefinition]:
    """Catalog entries read in the main header dump (everything public)."""
    return [entry for entry in catalog if not entry.is_private]


def name_for_code(code: str, catalog: Iterable[TagDefinition] = TAG_CATALOG) -> Optional[str]:
    """Return the catalog name for *code*, or None when it is not listed."""
    tag = tag_from_code(code)
    for entry in catalog:
        if entry.tag == tag:
            return entry.name
    return None


validate_catalog(TAG_CATALOG)
