"""Tests for dcmsummary/cli.py."""

import subprocess
from unittest.mock import patch

import pydicom
import pytest
from pydicom.dataset import FileDataset
from pydicom.uid import ExplicitVRLittleEndian

from dcmsummary.cli import main


def _write_dicom(path: str) -> None:
    """Write a minimal MR file with only a couple of tags."""
    file_meta = pydicom.Dataset()
    file_meta.MediaStorageSOPClassUID = pydicom.uid.UID("1.2.840.10008.5.1.4.1.1.4")
    file_meta.MediaStorageSOPInstanceUID = pydicom.uid.generate_uid()
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(path, {}, file_meta=file_meta, preamble=b"\0" * 128)
    ds.Modality = "MR"
    ds.RepetitionTime = "2000"
    ds.save_as(path)


class TestOptions:
    def test_unknown_log_level_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--log-level", "loud", "search", "0018,0080", "scan.dcm"])
        assert excinfo.value.code == 2
        assert "invalid choice" in capsys.readouterr().err

    def test_log_level_is_case_insensitive(self, tmp_path, capsys):
        path = str(tmp_path / "scan.dcm")
        _write_dicom(path)
        assert main(["--log-level", "debug", "--pydicom", "search", "RepetitionTime", path]) == 0
        assert capsys.readouterr().out.strip() == "2000"


class TestSearchCommand:
    def test_prints_value(self, tmp_path, capsys):
        path = str(tmp_path / "scan.dcm")
        _write_dicom(path)
        assert main(["--pydicom", "search", "RepetitionTime", path]) == 0
        assert capsys.readouterr().out.strip() == "2000"

    def test_absent_tag_prints_empty_line(self, tmp_path, capsys):
        path = str(tmp_path / "scan.dcm")
        _write_dicom(path)
        assert main(["--pydicom", "search", "0018,0081", path]) == 0
        assert capsys.readouterr().out == "\n"

    def test_unknown_keyword_fails(self, tmp_path):
        path = str(tmp_path / "scan.dcm")
        _write_dicom(path)
        assert main(["--pydicom", "search", "Bogus", path]) == 1


class TestHeaderCommand:
    def test_incomplete_header_fails_without_output(self, tmp_path, capsys):
        path = str(tmp_path / "scan.dcm")
        _write_dicom(path)
        assert main(["--pydicom", "header", path]) == 1
        assert capsys.readouterr().out == ""

    def test_missing_dcmdump_fails(self, tmp_path):
        with patch("dcmsummary.tools.subprocess.run", side_effect=FileNotFoundError):
            assert main(["header", str(tmp_path / "scan.dcm")]) == 1


class TestExportCommand:
    def test_prints_converter_output(self, tmp_path, capsys):
        done = subprocess.CompletedProcess(args=[], returncode=0, stdout="Conversion done", stderr="")
        with patch("dcmsummary.tools.subprocess.run", return_value=done):
            assert main(["export", str(tmp_path)]) == 0
        assert "Conversion done" in capsys.readouterr().out

    def test_missing_directory_fails(self, tmp_path):
        assert main(["export", str(tmp_path / "missing")]) == 1
