"""
pipeline.py - Header dump to protocol summary.

One call to build_header_report() performs a full header action:

1. Dump the public catalog tags of the file and parse them.
2. Dump the private slice-time and PAT-mode tags on their own.
3. Count the volumes in the file's directory.
4. Derive the inferred values and render the summary template.

Any error aborts the action; no partially filled summary is returned.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from dcmsummary.catalog import (
    PAT_MODE_TAG,
    SLICE_TIMES_TAG,
    SUMMARY_TEMPLATE,
    TAG_CATALOG,
    TagDefinition,
    header_tags,
)
from dcmsummary.errors import ExternalToolFailure
from dcmsummary.inference import enrich, require
from dcmsummary.parser import parse_dump, parse_slice_timestamps
from dcmsummary.renderer import render
from dcmsummary.tools import DcmdumpDumper, Dumper, count_volumes

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class HeaderReport:
    """Outcome of one header action on a single DICOM file."""
    file_path: str
    summary: str
    raw_dump: str
    tags: Mapping[str, str] = field(default_factory=dict)

    def text(self) -> str:
        """Summary followed by the raw dump, as shown to the user."""
        return f"{self.summary}\n\n{self.raw_dump}"


# ---------------------------------------------------------------------------
# Core pipeline
# ---------------------------------------------------------------------------

def build_header_report(
    file_path: str,
    dumper: Optional[Dumper] = None,
    catalog: Iterable[TagDefinition] = TAG_CATALOG,
    template: str = SUMMARY_TEMPLATE,
    extensions: Optional[Iterable[str]] = None,
) -> HeaderReport:
    """
    Dump the header of *file_path* and render its protocol summary.

    Parameters
    ----------
    file_path : str
        One DICOM file of the series.
    dumper : Dumper, optional
        Header-dump collaborator.  Defaults to DcmdumpDumper.
    catalog : iterable of TagDefinition
        Tags to read.
    template : str
        Summary template.
    extensions : iterable of str, optional
        Volume file extensions.  Defaults to config value.

    Returns
    -------
    HeaderReport

    Raises
    ------
    ExternalToolFailure
        If the header dump fails or prints nothing.
    MissingTag, FormatError, DivisionByZero
        If a derived value cannot be computed.
    """
    catalog = tuple(catalog)
    dumper = dumper or DcmdumpDumper(catalog=catalog)

    codes = [entry.code for entry in header_tags(catalog)]
    raw_dump = dumper.run_dump(codes, file_path)
    if not raw_dump.strip():
        raise ExternalToolFailure(f"header dump of {file_path} produced no output")
    base = parse_dump(raw_dump)

    timestamps = parse_slice_timestamps(
        dumper.run_dump([SLICE_TIMES_TAG.code], file_path),
        SLICE_TIMES_TAG.name,
    )
    pat_mode = parse_dump(dumper.run_dump([PAT_MODE_TAG.code], file_path))
    base = {**base, PAT_MODE_TAG.name: require(pat_mode, PAT_MODE_TAG.name)}

    directory = os.path.dirname(os.path.abspath(file_path))
    n_volumes = count_volumes(directory, extensions)

    tags = enrich(base, timestamps, n_volumes)
    summary = render(tags, template)
    logger.info("Built protocol summary for %s (%d tags)", file_path, len(tags))

    return HeaderReport(
        file_path=file_path,
        summary=summary,
        raw_dump=raw_dump,
        tags=tags,
    )
