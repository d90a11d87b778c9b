"""
run_demo.py - End-to-end demonstration on synthetic data.

Generates a synthetic EPI series (if data/sample_epi is empty), prints its
protocol summary, looks up a single tag, and converts the series to NIfTI
when dcm2niix is installed.

Usage
-----
    python scripts/run_demo.py
"""

import logging
import os
import shutil
import sys

# Ensure repo root is on sys.path regardless of launch directory
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _REPO_ROOT)

from dcmsummary.config import CONFIG  # noqa: E402
from dcmsummary.pipeline import build_header_report  # noqa: E402
from dcmsummary.search import search_tag  # noqa: E402
from dcmsummary.tools import PydicomDumper, run_convert  # noqa: E402

logging.basicConfig(
    level=CONFIG["logging"]["level"],
    format="%(levelname)-8s %(message)s",
)
logger = logging.getLogger(__name__)

SAMPLE_FOLDER = os.path.join(_REPO_ROOT, "data", "sample_epi")
NIFTI_FOLDER = os.path.join(_REPO_ROOT, "data", "nifti")


def _ensure_sample_data() -> list[str]:
    """Generate synthetic data if the sample folder has no .IMA files."""
    if os.path.isdir(SAMPLE_FOLDER):
        files = sorted(f for f in os.listdir(SAMPLE_FOLDER) if f.endswith(".IMA"))
        if files:
            logger.info("Found %d volume(s) in %s, skipping generation.", len(files), SAMPLE_FOLDER)
            return files

    logger.info("No sample volumes in %s, generating.", SAMPLE_FOLDER)
    from scripts.generate_sample_data import generate  # noqa: E402 (lazy import)
    generate(SAMPLE_FOLDER)
    return sorted(f for f in os.listdir(SAMPLE_FOLDER) if f.endswith(".IMA"))


def main() -> None:
    print("=" * 60)
    print("STEP 1: Prepare input data")
    print("=" * 60)
    files = _ensure_sample_data()
    first = os.path.join(SAMPLE_FOLDER, files[0])
    print(f"  Series folder : {SAMPLE_FOLDER}")
    print(f"  Volumes       : {len(files)}")
    print()

    dumper = PydicomDumper()

    print("=" * 60)
    print("STEP 2: Protocol summary")
    print("=" * 60)
    print(build_header_report(first, dumper=dumper).text())
    print()

    print("=" * 60)
    print("STEP 3: Tag search")
    print("=" * 60)
    for tag in ("RepetitionTime", "(0018,1312)"):
        print(f"  {tag:<16}: {search_tag(tag, first, dumper=dumper)}")
    print()

    print("=" * 60)
    print("STEP 4: NIfTI export")
    print("=" * 60)
    converter = CONFIG["tools"]["convert"]["command"]
    if shutil.which(converter) is None:
        print(f"  {converter} not found on PATH, skipping.")
    else:
        os.makedirs(NIFTI_FOLDER, exist_ok=True)
        print(run_convert(SAMPLE_FOLDER, output_dir=NIFTI_FOLDER))
    print()


if __name__ == "__main__":
    main()
