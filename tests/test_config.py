"""Tests for dcmsummary/config.py."""

from dcmsummary.config import CONFIG, _deep_merge, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "absent.yaml"))
        assert config["tools"]["dump"]["command"] == "dcmdump"
        assert config["volumes"]["extensions"] == ["dcm", "ima", "IMA"]

    def test_user_values_override_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("tools:\n  convert:\n    command: /opt/dcm2niix\n")
        config = load_config(str(path))
        assert config["tools"]["convert"]["command"] == "/opt/dcm2niix"
        assert config["tools"]["convert"]["args"] == ["-z", "y"]
        assert config["tools"]["dump"]["command"] == "dcmdump"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path))["tools"]["timeout_s"] == 120.0

    def test_singleton_loaded(self):
        assert "tools" in CONFIG and "volumes" in CONFIG


class TestDeepMerge:
    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        merged = _deep_merge(base, {"a": {"c": 2}})
        assert merged == {"a": {"b": 1, "c": 2}}
        assert base == {"a": {"b": 1}}
