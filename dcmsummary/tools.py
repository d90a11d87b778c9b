"""
tools.py - External collaborators: header dumper, NIfTI converter, listing.

The summary pipeline only ever talks to a dumper through one call:

    run_dump(tag_codes, file_path) -> text

where *text* is the bracketed "[Name] [value]" format read by
dcmsummary.parser.  Two dumpers are provided:

- DcmdumpDumper runs DCMTK's dcmdump and reformats its lines.
- PydicomDumper produces the same text in-process with pydicom.  It is
  handy for demos and tests on machines without DCMTK.

NIfTI export shells out to dcm2niix.  Its output is passed through for
display and not interpreted.
"""

import logging
import os
import re
import subprocess
from typing import Iterable, Optional, Protocol, Sequence

import pydicom
from pydicom.datadict import keyword_for_tag
from pydicom.errors import InvalidDicomError
from pydicom.multival import MultiValue

from dcmsummary.catalog import TAG_CATALOG, TagDefinition, format_tag, name_for_code, tag_from_code
from dcmsummary.config import CONFIG
from dcmsummary.errors import ExternalToolFailure

logger = logging.getLogger(__name__)

# (0018,0080) DS [2000]                                  #   4, 1 RepetitionTime
_DCMDUMP_LINE = re.compile(
    r"^\s*\(([0-9A-Fa-f]{4}),([0-9A-Fa-f]{4})\)\s+\S+\s+(.*?)\s*#"
)
_NO_VALUE = "(no value available)"
# Suffix dcmdump puts on values cut short in its default -L mode.
_TRUNCATED = "..."


class Dumper(Protocol):
    def run_dump(self, tag_codes: Sequence[str], file_path: str) -> str:
        ...


def display_name(code: str, catalog: Iterable[TagDefinition] = TAG_CATALOG) -> str:
    """Catalog name for *code*, else the DICOM keyword, else the code."""
    name = name_for_code(code, catalog)
    if name:
        return name
    tag = tag_from_code(code)
    return keyword_for_tag(tag) or format_tag(tag)


def run_tool(command: Sequence[str], timeout: Optional[float] = None) -> str:
    """
    Run *command* once and return its standard output.

    Raises
    ------
    ExternalToolFailure
        If the program is missing, times out or exits non-zero.
    """
    timeout = timeout if timeout is not None else CONFIG["tools"]["timeout_s"]
    logger.info("Running: %s", " ".join(command))
    try:
        result = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise ExternalToolFailure(f"{command[0]} not found on PATH", command) from None
    except subprocess.TimeoutExpired:
        raise ExternalToolFailure(f"{command[0]} timed out after {timeout}s", command) from None

    if result.returncode != 0:
        logger.error("%s exited with %d: %s", command[0], result.returncode, result.stderr.strip())
        raise ExternalToolFailure(
            f"{command[0]} exited with status {result.returncode}",
            command,
            returncode=result.returncode,
            stderr=result.stderr,
        )
    return result.stdout


# ---------------------------------------------------------------------------
# Header dumpers
# ---------------------------------------------------------------------------

def _bracket(value: str) -> str:
    return value if value.startswith("[") else f"[{value}]"


def normalize_dcmdump(output: str, catalog: Iterable[TagDefinition] = TAG_CATALOG) -> str:
    """
    Rewrite dcmdump lines as "[Name] [value]" lines.

    Lines that are not tag lines, and tags printed without a value, are
    skipped.

    Raises
    ------
    ExternalToolFailure
        If a value was cut short by dcmdump (printed ending in "...").
    """
    catalog = tuple(catalog)
    lines = []
    for line in output.splitlines():
        match = _DCMDUMP_LINE.match(line)
        if match is None:
            continue
        code = f"{match.group(1)},{match.group(2)}"
        value = match.group(3).strip()
        if not value or value == _NO_VALUE or value == "[]":
            logger.debug("No value for (%s)", code)
            continue
        if value.endswith(_TRUNCATED):
            raise ExternalToolFailure(
                f"dcmdump shortened the value of ({code}); run it with +L to print long values"
            )
        lines.append(f"[{display_name(code, catalog)}] {_bracket(value)}")
    return "\n".join(lines)


class DcmdumpDumper:
    """Header dumper backed by DCMTK dcmdump (one ``+P`` per tag)."""

    def __init__(
        self,
        command: Optional[str] = None,
        args: Optional[Sequence[str]] = None,
        catalog: Iterable[TagDefinition] = TAG_CATALOG,
        timeout: Optional[float] = None,
    ):
        dump_cfg = CONFIG["tools"]["dump"]
        self.command = command or dump_cfg["command"]
        self.args = list(args if args is not None else dump_cfg["args"])
        self.catalog = tuple(catalog)
        self.timeout = timeout

    def build_command(self, tag_codes: Sequence[str], file_path: str) -> list[str]:
        cmd = [self.command, *self.args]
        for code in tag_codes:
            cmd += ["+P", format_tag(tag_from_code(code))]
        cmd.append(file_path)
        return cmd

    def run_dump(self, tag_codes: Sequence[str], file_path: str) -> str:
        output = run_tool(self.build_command(tag_codes, file_path), timeout=self.timeout)
        return normalize_dcmdump(output, self.catalog)


def _format_element_value(value) -> str:
    if isinstance(value, (MultiValue, list, tuple)):
        return "\\".join(str(v) for v in value)
    return str(value)


class PydicomDumper:
    """Header dumper that reads the file in-process with pydicom."""

    def __init__(self, catalog: Iterable[TagDefinition] = TAG_CATALOG):
        self.catalog = tuple(catalog)

    def run_dump(self, tag_codes: Sequence[str], file_path: str) -> str:
        try:
            ds = pydicom.dcmread(file_path, stop_before_pixels=True)
        except (OSError, InvalidDicomError) as exc:
            raise ExternalToolFailure(f"cannot read {file_path}: {exc}") from exc

        lines = []
        for code in tag_codes:
            tag = tag_from_code(code)
            elem = ds.get(tag)
            if elem is None or elem.value is None or elem.VM == 0:
                logger.debug("No value for (%s) in %s", format_tag(tag), file_path)
                continue
            if isinstance(elem.value, bytes):
                logger.debug("Skipping undecoded value of (%s)", format_tag(tag))
                continue
            name = display_name(code, self.catalog)
            lines.append(f"[{name}] [{_format_element_value(elem.value)}]")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# NIfTI export and directory listing
# ---------------------------------------------------------------------------

def run_convert(
    directory: str,
    output_dir: Optional[str] = None,
    command: Optional[str] = None,
    args: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Convert the DICOM series in *directory* to NIfTI with dcm2niix.

    Parameters
    ----------
    directory : str
        Folder holding the DICOM files.
    output_dir : str, optional
        Where dcm2niix writes its files.  Defaults to *directory*.

    Returns
    -------
    str
        The converter's standard output, for display.

    Raises
    ------
    NotADirectoryError
        If *directory* does not exist.
    ExternalToolFailure
        If dcm2niix cannot be run or fails.
    """
    if not os.path.isdir(directory):
        raise NotADirectoryError(f"Not a directory: {directory}")

    convert_cfg = CONFIG["tools"]["convert"]
    cmd = [
        command or convert_cfg["command"],
        *(args if args is not None else convert_cfg["args"]),
        "-o", output_dir or directory,
        directory,
    ]
    output = run_tool(cmd, timeout=timeout)
    logger.info("Converted %s", directory)
    return output


def count_volumes(directory: str, extensions: Optional[Iterable[str]] = None) -> int:
    """
    Count the DICOM files in *directory* by extension.

    Matching is case-sensitive on the text after the last dot, so with the
    default set "scan.IMA" and "scan.ima" count but "scan.DCM" does not.
    """
    extensions = set(extensions if extensions is not None else CONFIG["volumes"]["extensions"])
    if not os.path.isdir(directory):
        logger.error("Folder not found: %s", directory)
        return 0

    count = sum(
        1
        for f in os.listdir(directory)
        if not f.startswith(".")
        and os.path.isfile(os.path.join(directory, f))
        and os.path.splitext(f)[1][1:] in extensions
    )
    logger.debug("Found %d volume file(s) in %s", count, directory)
    return count
