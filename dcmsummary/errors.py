"""
errors.py - Error kinds raised while building a protocol summary.

Every error derives from DicomSummaryError so callers can catch the whole
family in one place, and from the closest built-in so code that already
handles LookupError / ValueError / ZeroDivisionError keeps working.
"""

from typing import Optional, Sequence


class DicomSummaryError(Exception):
    """Base class for all dcmsummary errors."""


class MissingTag(DicomSummaryError, LookupError):
    """A tag required for inference was absent from the parsed dump."""

    def __init__(self, tag: str):
        super().__init__(f"required tag {tag!r} not found in header dump")
        self.tag = tag


class FormatError(DicomSummaryError, ValueError):
    """A tag value could not be parsed as the expected number."""

    def __init__(self, tag: str, value: str, expected: str = "a number"):
        super().__init__(f"value {value!r} of tag {tag!r} is not {expected}")
        self.tag = tag
        self.value = value


class DivisionByZero(DicomSummaryError, ZeroDivisionError):
    """A ratio had a zero denominator."""


class ExternalToolFailure(DicomSummaryError, RuntimeError):
    """An external program could not be run, failed, or printed nothing."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
