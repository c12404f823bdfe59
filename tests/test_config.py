"""Tests for TOML configuration loading."""

import tomllib

import pytest

from shared.config import GlobalConfig, RustifiedConfig, ScanConfig


class TestRustifiedConfig:
    """Tests for RustifiedConfig.load and helpers."""

    def test_defaults(self):
        """Test the built-in defaults."""
        config = RustifiedConfig()
        assert config.scan == ScanConfig()
        assert config.scan.markers == ["rust_panic", "rust_eh_personality"]
        assert config.scan.workers == 1
        assert config.global_settings.log_level == "WARNING"

    def test_load_sections(self, tmp_path):
        """Test that [global] and [scan] keys are applied."""
        path = tmp_path / "config.toml"
        path.write_text(
            '[global]\nlog_level = "DEBUG"\n\n'
            '[scan]\nmarkers = ["__rust_alloc"]\nworkers = 3\n'
        )
        config = RustifiedConfig.load(path)
        assert config.global_settings.log_level == "DEBUG"
        assert config.scan.markers == ["__rust_alloc"]
        assert config.scan.workers == 3
        assert config.scan.max_file_size == 0

    def test_unknown_keys_ignored(self, tmp_path):
        """Test that unknown keys and sections do not break loading."""
        path = tmp_path / "config.toml"
        path.write_text('[scan]\nbogus = 1\n\n[other]\nx = 2\n')
        assert RustifiedConfig.load(path).scan == ScanConfig()

    def test_missing_explicit_file(self, tmp_path):
        """Test that an explicit path that does not exist raises."""
        with pytest.raises(FileNotFoundError):
            RustifiedConfig.load(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path):
        """Test that malformed TOML surfaces as a decode error."""
        path = tmp_path / "bad.toml"
        path.write_text("[scan\nmarkers = ")
        with pytest.raises(tomllib.TOMLDecodeError):
            RustifiedConfig.load(path)

    def test_to_dict(self):
        """Test serialisation of the whole tree."""
        data = RustifiedConfig(global_settings=GlobalConfig(debug=True)).to_dict()
        assert data["global_settings"]["debug"] is True
        assert data["scan"]["markers"] == ["rust_panic", "rust_eh_personality"]


class TestScanConfigValidation:
    """Tests for type checks on values read from TOML."""

    def _load(self, tmp_path, text):
        path = tmp_path / "config.toml"
        path.write_text(text)
        return RustifiedConfig.load(path)

    def test_string_markers_rejected(self, tmp_path):
        """Test that a bare string is not split into one marker per character."""
        with pytest.raises(ValueError, match="scan.markers"):
            self._load(tmp_path, '[scan]\nmarkers = "rust_panic"\n')

    def test_integer_markers_rejected(self, tmp_path):
        """Test that a non-list markers value raises ValueError, not TypeError."""
        with pytest.raises(ValueError, match="scan.markers"):
            self._load(tmp_path, "[scan]\nmarkers = 5\n")

    @pytest.mark.parametrize("entry", ['""', "3"])
    def test_bad_marker_entry_rejected(self, tmp_path, entry):
        """Test that empty or non-string entries are rejected."""
        with pytest.raises(ValueError, match="entries"):
            self._load(tmp_path, f'[scan]\nmarkers = ["rust_panic", {entry}]\n')

    def test_section_not_a_table(self, tmp_path):
        """Test that a scalar in place of [scan] raises ValueError."""
        with pytest.raises(ValueError, match="ScanConfig"):
            self._load(tmp_path, "scan = 5\n")

    @pytest.mark.parametrize("value", ["0", "true", '"4"', "-1"])
    def test_bad_workers_rejected(self, tmp_path, value):
        """Test that workers must be a positive integer."""
        with pytest.raises(ValueError, match="scan.workers"):
            self._load(tmp_path, f"[scan]\nworkers = {value}\n")

    def test_follow_symlinks_must_be_bool(self, tmp_path):
        """Test that follow_symlinks rejects non-boolean values."""
        with pytest.raises(ValueError, match="follow_symlinks"):
            self._load(tmp_path, '[scan]\nfollow_symlinks = "yes"\n')
