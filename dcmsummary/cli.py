"""
cli.py - Command-line entry point.

Usage
-----
    dcmsummary header path/to/scan.IMA          # protocol summary + raw dump
    dcmsummary search RepetitionTime scan.IMA   # one tag value
    dcmsummary export path/to/series/           # dcm2niix conversion

Add ``--pydicom`` to read headers in-process instead of calling dcmdump.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from dcmsummary.config import CONFIG
from dcmsummary.errors import DicomSummaryError
from dcmsummary.pipeline import build_header_report
from dcmsummary.search import search_tag
from dcmsummary.tools import DcmdumpDumper, PydicomDumper, run_convert

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dcmsummary",
        description="Summarize the acquisition protocol of a DICOM series.",
    )
    parser.add_argument(
        "--pydicom",
        action="store_true",
        help="read headers with pydicom instead of dcmdump",
    )
    parser.add_argument(
        "--log-level",
        default=CONFIG["logging"]["level"],
        type=str.upper,
        choices=LOG_LEVELS,
        help="logging level (default: %(default)s)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    header = sub.add_parser("header", help="print the protocol summary and header dump")
    header.add_argument("file", help="one DICOM file of the series")

    search = sub.add_parser("search", help="print the value of one tag")
    search.add_argument("tag", help='tag code ("0018,0080") or keyword ("RepetitionTime")')
    search.add_argument("file", help="DICOM file")

    export = sub.add_parser("export", help="convert a DICOM directory to NIfTI")
    export.add_argument("directory", help="folder holding the DICOM series")
    export.add_argument("-o", "--output-dir", default=None, help="output folder")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(levelname)-8s %(message)s",
    )
    dumper = PydicomDumper() if args.pydicom else DcmdumpDumper()

    try:
        if args.command == "header":
            print(build_header_report(args.file, dumper=dumper).text())
        elif args.command == "search":
            value = search_tag(args.tag, args.file, dumper=dumper)
            print(value if value is not None else "")
        elif args.command == "export":
            print(run_convert(args.directory, output_dir=args.output_dir))
    except DicomSummaryError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 1
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
