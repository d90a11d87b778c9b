"""
renderer.py - Fill the summary template from a tag map.

All keys are combined into one alternation pattern, longest first, and the
template is scanned once.  A key that is a substring of another key
("Manufacturer" / "ManufacturerModelName") therefore never splits the
longer placeholder, and substituted values are never rescanned.
"""

import logging
import re
from typing import Mapping

from dcmsummary.catalog import SUMMARY_TEMPLATE

logger = logging.getLogger(__name__)


def build_pattern(keys) -> re.Pattern:
    ordered = sorted(set(keys), key=lambda k: (-len(k), k))
    return re.compile("|".join(re.escape(k) for k in ordered))


def render(values: Mapping[str, str], template: str = SUMMARY_TEMPLATE) -> str:
    """
    Replace every occurrence of every key of *values* in *template*.

    Parameters
    ----------
    values : Mapping[str, str]
        Enriched tag map.
    template : str
        Text containing key names as placeholders.

    Returns
    -------
    str
        The rendered text.  An empty mapping returns *template* unchanged.
    """
    keys = [key for key in values if key]
    if not keys:
        return template

    pattern = build_pattern(keys)
    rendered, count = pattern.subn(lambda m: str(values[m.group(0)]), template)
    logger.debug("Rendered %d placeholder(s)", count)
    return rendered
