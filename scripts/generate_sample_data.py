"""
generate_sample_data.py - Create a synthetic Siemens EPI series for demos.

Writes a handful of small mosaic-style DICOM files to data/sample_epi/ so
you can try the header summary without real scanner data.

Usage
-----
    python scripts/generate_sample_data.py

After running, try:
    dcmsummary --pydicom header data/sample_epi/epi_0001.IMA
"""

import os

import numpy as np
import pydicom
from pydicom.dataset import FileDataset
from pydicom.uid import ExplicitVRLittleEndian

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

OUTPUT_FOLDER = os.path.join(_REPO_ROOT, "data", "sample_epi")

N_VOLUMES = 5

# Multiband 2, interleaved: 12 slices, 6 distinct acquisition times.
SLICE_TIMES = [0.0, 1000.0, 200.0, 1200.0, 400.0, 1400.0] * 2


def _make_dicom(path: str, instance: int, size: int = 64) -> None:
    """Write one synthetic EPI volume with the tags the summary reads."""
    file_meta = pydicom.Dataset()
    file_meta.MediaStorageSOPClassUID = pydicom.uid.UID("1.2.840.10008.5.1.4.1.1.4")
    file_meta.MediaStorageSOPInstanceUID = pydicom.uid.generate_uid()
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(path, {}, file_meta=file_meta, preamble=b"\0" * 128)
    ds.Modality = "MR"
    ds.InstanceNumber = instance

    # --- Scanner ---
    ds.Manufacturer = "SIEMENS"
    ds.ManufacturerModelName = "Prisma_fit"
    ds.MagneticFieldStrength = "3"

    # --- Sequence ---
    ds.ScanningSequence = "EP"
    ds.SequenceName = "epfid2d1_64"
    ds.RepetitionTime = "1500"
    ds.EchoTime = "30"
    ds.FlipAngle = "70"
    ds.SliceThickness = "3"
    ds.SpacingBetweenSlices = "3.6"
    ds.PixelSpacing = ["3", "3"]
    ds.AcquisitionMatrix = [64, 0, 0, 64]
    ds.InPlanePhaseEncodingDirection = "COL"
    ds.NumberOfPhaseEncodingSteps = "64"
    ds.EchoTrainLength = "32"
    ds.PixelBandwidth = "2232"

    # --- Siemens private tags ---
    ds.add_new([0x0019, 0x0010], "LO", "SIEMENS MR HEADER")
    ds.add_new([0x0019, 0x1029], "FD", SLICE_TIMES)
    ds.add_new([0x0051, 0x0010], "LO", "SIEMENS MR HEADER")
    ds.add_new([0x0051, 0x1011], "LO", "p2")

    # --- Pixel data ---
    rng = np.random.default_rng(instance)
    ds.Rows = size
    ds.Columns = size
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.PixelRepresentation = 0
    ds.BitsAllocated = 16
    ds.BitsStored = 16
    ds.HighBit = 15
    ds.PixelData = rng.integers(0, 1000, size=(size, size), dtype=np.uint16).tobytes()

    ds.save_as(path)


def generate(output_folder: str = OUTPUT_FOLDER, n_volumes: int = N_VOLUMES) -> None:
    """Generate *n_volumes* synthetic EPI files into *output_folder*."""
    os.makedirs(output_folder, exist_ok=True)

    print(f"Writing {n_volumes} synthetic EPI volumes to: {output_folder}")
    for i in range(1, n_volumes + 1):
        filename = f"epi_{i:04d}.IMA"
        _make_dicom(os.path.join(output_folder, filename), instance=i)
        print(f"  [{i:02d}/{n_volumes}] {filename}")

    print(f"Done.  Summarize the series with:")
    print(f"  dcmsummary --pydicom header {os.path.join(output_folder, 'epi_0001.IMA')}")


if __name__ == "__main__":
    generate()
