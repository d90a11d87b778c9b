"""
search.py - Look up the value of a single tag.

The tag may be given as a code ("0018,0080", "(0018,0080)", "00180080")
or as a DICOM keyword ("RepetitionTime").
"""

import logging
from typing import Optional

from pydicom.datadict import tag_for_keyword

from dcmsummary.catalog import format_tag, tag_from_code
from dcmsummary.parser import tokenize
from dcmsummary.tools import DcmdumpDumper, Dumper

logger = logging.getLogger(__name__)


def resolve_tag_code(tag: str) -> str:
    """
    Normalize *tag* to a "gggg,eeee" code.

    Raises
    ------
    ValueError
        If *tag* is neither a tag code nor a known keyword.
    """
    try:
        return format_tag(tag_from_code(tag))
    except ValueError:
        pass

    number = tag_for_keyword(tag.strip())
    if number is None:
        raise ValueError(f"Unknown DICOM tag or keyword: {tag!r}")
    return f"{number >> 16:04x},{number & 0xFFFF:04x}"


def search_tag(tag: str, file_path: str, dumper: Optional[Dumper] = None) -> Optional[str]:
    """
    Return the value of *tag* in *file_path*, or None if it has none.

    The dump is scoped to exactly this tag and its last token is taken as
    the value.
    """
    code = resolve_tag_code(tag)
    dumper = dumper or DcmdumpDumper()
    tokens = tokenize(dumper.run_dump([code], file_path))
    if len(tokens) < 2:
        logger.info("No value for (%s) in %s", code, file_path)
        return None
    return tokens[-1]
