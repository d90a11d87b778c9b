"""
inference.py - Values derived from the parsed header dump.

None of these values is stored literally in the DICOM header.  Each is a
small ratio or heuristic over tags that are:

    Number of slices        len(slice timestamps)
    Slice order             ascending / descending / interleaved
    Slice acceleration      n_slices // n_distinct_timestamps   (multiband)
    In-plane acceleration   NumberOfPhaseEncodingSteps // EchoTrainLength
    Partial Fourier         PhaseEncodingSteps // PhaseEncodingMatrixSize
    Slice gap               SpacingBetweenSlices - SliceThickness
    Phase-encoding label    COL -> A-P, ROW -> R-L

All ratios use truncating integer division.  Slice gap uses exact decimal
arithmetic and is truncated, not rounded, to two decimals.

LIMITATIONS
-----------
- The heuristics assume a Siemens mosaic EPI series.  For other vendors the
  private slice-time tag is missing and enrichment fails with MissingTag.
- The partial Fourier factor is computed on request only; it is not part of
  the enriched map or the summary.
"""

import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from types import MappingProxyType
from typing import Sequence, Union

import numpy as np

from dcmsummary.errors import DivisionByZero, FormatError, MissingTag
from dcmsummary.parser import TagValueMap

logger = logging.getLogger(__name__)

Number = Union[int, float, str, Decimal]

PE_DIRECTION_LABELS: dict[str, str] = {
    "COL": "A-P",
    "ROW": "R-L",
}

_TWO_PLACES = Decimal("0.01")


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------

def require(values: TagValueMap, name: str) -> str:
    """Return the value of *name*, raising MissingTag if absent or empty."""
    value = values.get(name)
    if value is None or value == "":
        raise MissingTag(name)
    return value


def to_int(value: Number, name: str = "") -> int:
    """Parse an integer tag value such as IS ``"64"``."""
    try:
        return int(str(value).strip())
    except ValueError:
        raise FormatError(name, str(value), "an integer") from None


def to_decimal(value: Number, name: str = "") -> Decimal:
    """Parse a decimal tag value such as DS ``"3.6"`` without float error."""
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise FormatError(name, str(value)) from None
    if not result.is_finite():
        raise FormatError(name, str(value))
    return result


def truncating_div(numerator: int, denominator: int, what: str = "ratio") -> int:
    """Integer division that truncates toward zero."""
    if denominator == 0:
        raise DivisionByZero(f"cannot compute {what}: denominator is zero")
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator >= 0) else -quotient


# ---------------------------------------------------------------------------
# Slice timing
# ---------------------------------------------------------------------------

def get_number_of_slices(timestamps: Sequence[float]) -> int:
    return len(timestamps)


def infer_slice_order(timestamps: Sequence[float]) -> str:
    """
    Classify the acquisition order of slices from their timestamps.

    >>> infer_slice_order([1, 2, 3])
    'ascending'
    >>> infer_slice_order([2, 1, 3])
    'interleaved'
    """
    times = np.asarray(timestamps, dtype=np.float64)
    ascending = np.sort(times)
    if np.array_equal(times, ascending):
        return "ascending"
    if np.array_equal(times, ascending[::-1]):
        return "descending"
    return "interleaved"


def get_slice_acceleration_factor(timestamps: Sequence[float]) -> int:
    """
    Multiband factor: slices acquired at the same instant share a timestamp.

    Raises
    ------
    DivisionByZero
        If there are no timestamps.
    """
    times = np.asarray(timestamps, dtype=np.float64)
    distinct = int(np.unique(times).size)
    return truncating_div(int(times.size), distinct, "slice acceleration factor")


# ---------------------------------------------------------------------------
# Acquisition ratios
# ---------------------------------------------------------------------------

def get_inplane_acceleration_factor(phase_encoding_steps: Number, echo_train_length: Number) -> int:
    steps = to_int(phase_encoding_steps, "NumberOfPhaseEncodingSteps")
    etl = to_int(echo_train_length, "EchoTrainLength")
    return truncating_div(steps, etl, "in-plane acceleration factor")


def get_partial_fourier(phase_encoding_steps: Number, phase_encoding_matrix_size: Number) -> int:
    steps = to_int(phase_encoding_steps, "NumberOfPhaseEncodingSteps")
    matrix = to_int(phase_encoding_matrix_size, "PhaseEncodingMatrixSize")
    return truncating_div(steps, matrix, "partial Fourier factor")


def get_slice_gap(spacing_between_slices: Number, slice_thickness: Number) -> Decimal:
    """
    Gap between adjacent slices in mm, truncated to two decimals.

    >>> get_slice_gap("3.6", "3")
    Decimal('0.60')
    """
    spacing = to_decimal(spacing_between_slices, "SpacingBetweenSlices")
    thickness = to_decimal(slice_thickness, "SliceThickness")
    return (spacing - thickness).quantize(_TWO_PLACES, rounding=ROUND_DOWN)


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------

def infer_pe_direction(direction: str) -> str:
    """Map InPlanePhaseEncodingDirection to an anatomical label."""
    return PE_DIRECTION_LABELS.get(direction, "")


def get_inplane_resolution(pixel_spacing: str) -> str:
    """``"2\\2"`` -> ``"2x2"``."""
    return pixel_spacing.replace("\\", "x")


def get_inplane_matrix_size(acquisition_matrix: str) -> str:
    """``"64\\0\\0\\64"`` -> ``"64x64"`` (first and last component)."""
    parts = acquisition_matrix.split("\\")
    return f"{parts[0]}x{parts[-1]}"


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------

def enrich(
    base: TagValueMap,
    timestamps: Sequence[float],
    number_of_volumes: int,
) -> TagValueMap:
    """
    Build the enriched tag map: every base entry plus every derived value.

    *base* is not modified.  Derived values are computed in dependency
    order; the first failure aborts the whole enrichment.

    Parameters
    ----------
    base : Mapping[str, str]
        Parsed header dump (see parser.parse_dump).
    timestamps : sequence of float
        Per-slice acquisition times (see parser.parse_slice_timestamps).
    number_of_volumes : int
        Number of DICOM files in the series directory.

    Returns
    -------
    Mapping[str, str]
        New read-only mapping; derived values rendered as strings.

    Raises
    ------
    MissingTag, FormatError, DivisionByZero
    """
    derived = {
        "NumberOfSlices": get_number_of_slices(timestamps),
        "SliceOrder": infer_slice_order(timestamps),
        "SliceAccelerationFactor": get_slice_acceleration_factor(timestamps),
        "InplaneAccelerationFactor": get_inplane_acceleration_factor(
            require(base, "NumberOfPhaseEncodingSteps"),
            require(base, "EchoTrainLength"),
        ),
        "SliceGap": get_slice_gap(
            require(base, "SpacingBetweenSlices"),
            require(base, "SliceThickness"),
        ),
        "NumberOfVolumes": number_of_volumes,
        "PEDirection": infer_pe_direction(require(base, "InPlanePhaseEncodingDirection")),
        "InplaneResolution": get_inplane_resolution(require(base, "PixelSpacing")),
        "InplaneMatrixSize": get_inplane_matrix_size(require(base, "AcquisitionMatrix")),
    }
    for name, value in derived.items():
        logger.debug("Derived %s = %s", name, value)

    enriched = dict(base)
    enriched.update((name, str(value)) for name, value in derived.items())
    return MappingProxyType(enriched)
