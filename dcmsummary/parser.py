"""
parser.py - Turn header-dump text into a tag map.

The dump text is a flat stream of whitespace-separated tokens in which
names and values alternate, values usually wrapped in brackets:

    [RepetitionTime] [2000] [EchoTime] [30]

Brackets are decoration only.  After stripping them the tokens are paired
up in order.  A trailing unpaired token is dropped.

KNOWN LIMITATION
----------------
A value containing whitespace (e.g. a protocol name "ep2d bold") is split
into several tokens and shifts every following pair.  Only tags whose
values are whitespace-free are listed in the catalog for that reason.
"""

import logging
from types import MappingProxyType
from typing import Mapping

import numpy as np

from dcmsummary.catalog import SLICE_TIMES_TAG
from dcmsummary.errors import FormatError, MissingTag

logger = logging.getLogger(__name__)

# Read-only, insertion-ordered name -> raw value mapping.
TagValueMap = Mapping[str, str]

_STRIP_BRACKETS = str.maketrans("", "", "[]")


def tokenize(text: str) -> list[str]:
    """Strip bracket decoration and split *text* on whitespace."""
    return text.translate(_STRIP_BRACKETS).split()


def parse_dump(text: str) -> TagValueMap:
    """
    Parse header-dump text into a read-only ordered tag map.

    Parameters
    ----------
    text : str
        Raw output of the header-dump tool.  May be empty.

    Returns
    -------
    Mapping[str, str]
        Tag name -> raw value, in the order the names appear.  If a name
        occurs twice the later value wins but the first position is kept.
    """
    tokens = tokenize(text)
    if len(tokens) % 2:
        logger.debug("Dropping unpaired trailing token %r", tokens[-1])
        tokens = tokens[:-1]

    values: dict[str, str] = {}
    for name, value in zip(tokens[0::2], tokens[1::2]):
        values[name] = value

    logger.debug("Parsed %d tag(s) from dump text", len(values))
    return MappingProxyType(values)


def render_pairs(values: TagValueMap) -> str:
    """Render *values* back to flat "name value name value" text."""
    return " ".join(f"{name} {value}" for name, value in values.items())


def parse_slice_timestamps(text: str, name: str = SLICE_TIMES_TAG.name) -> np.ndarray:
    """
    Extract per-slice acquisition times from a single-tag dump.

    The tag value is a backslash-delimited list of numbers, e.g.
    ``[MosaicRefAcqTimes] [0\\1000\\500\\1500]``.

    Raises
    ------
    MissingTag
        If the dump has no value for *name*.
    FormatError
        If any component is not a number.
    """
    raw = parse_dump(text).get(name)
    if not raw:
        raise MissingTag(name)

    try:
        times = [float(part) for part in raw.split("\\")]
    except ValueError:
        raise FormatError(name, raw, "a list of numbers") from None

    return np.asarray(times, dtype=np.float64)
