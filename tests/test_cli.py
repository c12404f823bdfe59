"""Tests for the rustified command line."""

import json
import os

import pytest
from click.testing import CliRunner

from binary_builders import build_elf, build_pe
from conftest import RUST_PANIC_SYMBOL
from rustified.cli import rustified_cli
from rustified.core.engine import RustifiedEngine


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path, rust_elf, clean_elf, rust_pe):
    (tmp_path / "target" / "debug").mkdir(parents=True)
    (tmp_path / "target" / "debug" / "app").write_bytes(rust_elf)
    (tmp_path / "target" / "debug" / "helper").write_bytes(clean_elf)
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "app.exe").write_bytes(rust_pe)
    (tmp_path / "notes.txt").write_text("rust_panic rust_eh_personality\n")
    return tmp_path


class TestReportLines:
    """Tests for the default line output."""

    def test_default_root_is_cwd(self, runner, project, monkeypatch):
        """Test that paths are printed as joined from '.'."""
        monkeypatch.chdir(project)
        result = runner.invoke(rustified_cli, [])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            "./dist/app.exe (function \"rust_eh_personality\" is found)",
            f'./target/debug/app (function "{RUST_PANIC_SYMBOL}" is found)',
        ]

    def test_explicit_root(self, runner, project):
        """Test scanning a directory given on the command line."""
        root = str(project / "target")
        result = runner.invoke(rustified_cli, [root])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            os.path.join(root, "debug", "app") + f' (function "{RUST_PANIC_SYMBOL}" is found)',
        ]

    def test_clean_tree_prints_nothing(self, runner, tmp_path, clean_elf):
        """Test that clean files produce no output and exit 0."""
        (tmp_path / "c_app").write_bytes(clean_elf)
        (tmp_path / "readme").write_text("rust_panic\n")
        result = runner.invoke(rustified_cli, [str(tmp_path)])
        assert result.exit_code == 0
        assert result.stdout == ""

    def test_extra_marker(self, runner, tmp_path):
        """Test that --marker extends the marker set."""
        (tmp_path / "alloc").write_bytes(build_elf(dynsym=["__rust_alloc"]))
        result = runner.invoke(rustified_cli, [str(tmp_path)])
        assert result.stdout == ""
        result = runner.invoke(rustified_cli, [str(tmp_path), "-m", "__rust_alloc"])
        assert result.stdout.splitlines() == [
            os.path.join(str(tmp_path), "alloc") + ' (function "__rust_alloc" is found)',
        ]

    def test_jobs(self, runner, project):
        """Test that --jobs keeps the output order."""
        serial = runner.invoke(rustified_cli, [str(project)])
        threaded = runner.invoke(rustified_cli, [str(project), "-j", "4"])
        assert threaded.exit_code == 0
        assert threaded.stdout == serial.stdout

    def test_corrupt_binary_is_skipped(self, runner, tmp_path, rust_pe):
        """Test that a corrupt container neither prints nor aborts the scan."""
        (tmp_path / "a_broken").write_bytes(build_elf(symtab=["main", 0x5000, "rust_panic"]))
        (tmp_path / "b_broken.exe").write_bytes(build_pe([(".data", b"rust_panic", 1 << 20)]))
        (tmp_path / "c_tool.exe").write_bytes(rust_pe)
        result = runner.invoke(rustified_cli, [str(tmp_path)])
        assert result.exit_code == 0
        lines = [line for line in result.stdout.splitlines() if line.startswith(str(tmp_path))]
        assert lines == [
            os.path.join(str(tmp_path), "c_tool.exe")
            + ' (function "rust_eh_personality" is found)',
        ]


class TestReports:
    """Tests for --json, --output and --summary."""

    def test_json_stdout(self, runner, project):
        """Test that --json replaces report lines with a JSON document."""
        result = runner.invoke(rustified_cli, [str(project), "--json"])
        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["report_type"] == "rustified_scan"
        assert report["counters"]["files_scanned"] == 4
        assert report["counters"]["evidence"] == 2
        assert [e["format"] for e in report["evidence"]] == ["pe", "elf"]
        assert report["evidence"][0]["cause"] == 'function "rust_eh_personality" is found'

    def test_output_file(self, runner, project, tmp_path_factory):
        """Test that --output writes the JSON report to disk."""
        out = tmp_path_factory.mktemp("reports") / "report.json"
        result = runner.invoke(rustified_cli, [str(project), "-o", str(out)])
        assert result.exit_code == 0, result.output
        report = json.loads(out.read_text())
        assert report["root"] == str(project)
        assert report["markers"] == ["rust_panic", "rust_eh_personality"]

    def test_summary(self, runner, project):
        """Test that --summary still prints the report lines and exits 0."""
        result = runner.invoke(rustified_cli, [str(project), "--summary"])
        assert result.exit_code == 0, result.output
        app = os.path.join(str(project), "dist", "app.exe")
        assert f'{app} (function "rust_eh_personality" is found)' in result.stdout
        assert "Files scanned" in result.output


class TestConfigAndErrors:
    """Tests for configuration handling and exit codes."""

    def test_config_markers(self, runner, tmp_path):
        """Test that [scan] markers from --config are used."""
        (tmp_path / "bin").mkdir()
        (tmp_path / "bin" / "alloc").write_bytes(build_elf(symtab=["__rust_alloc"]))
        config = tmp_path / "rustified.toml"
        config.write_text('[scan]\nmarkers = ["__rust_alloc"]\n')
        result = runner.invoke(rustified_cli, [str(tmp_path / "bin"), "-c", str(config)])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip().endswith('(function "__rust_alloc" is found)')

    def test_missing_config(self, runner, tmp_path):
        """Test that a missing config file exits with code 2."""
        result = runner.invoke(rustified_cli, [str(tmp_path), "-c", str(tmp_path / "nope.toml")])
        assert result.exit_code == 2

    def test_invalid_config(self, runner, tmp_path):
        """Test that malformed TOML exits with code 2."""
        config = tmp_path / "bad.toml"
        config.write_text("[scan\n")
        result = runner.invoke(rustified_cli, [str(tmp_path), "-c", str(config)])
        assert result.exit_code == 2

    def test_string_markers_config(self, runner, tmp_path):
        """Test that a bare string for [scan] markers is rejected, not split."""
        (tmp_path / "bin").mkdir()
        (tmp_path / "bin" / "app").write_bytes(build_elf(symtab=["main", "printf"]))
        config = tmp_path / "rustified.toml"
        config.write_text('[scan]\nmarkers = "rust_panic"\n')
        result = runner.invoke(rustified_cli, [str(tmp_path / "bin"), "-c", str(config)])
        assert result.exit_code == 2
        assert "function" not in result.stdout

    def test_integer_markers_config(self, runner, tmp_path):
        """Test that a non-list [scan] markers exits with code 2."""
        config = tmp_path / "rustified.toml"
        config.write_text("[scan]\nmarkers = 5\n")
        result = runner.invoke(rustified_cli, [str(tmp_path), "-c", str(config)])
        assert result.exit_code == 2
        assert not isinstance(result.exception, TypeError)

    def test_scan_section_not_a_table(self, runner, tmp_path):
        """Test that a scalar where [scan] belongs exits with code 2."""
        config = tmp_path / "rustified.toml"
        config.write_text("scan = 5\n")
        result = runner.invoke(rustified_cli, [str(tmp_path), "-c", str(config)])
        assert result.exit_code == 2

    def test_empty_marker(self, runner, tmp_path):
        """Test that an empty --marker exits with code 2."""
        result = runner.invoke(rustified_cli, [str(tmp_path), "-m", ""])
        assert result.exit_code == 2

    def test_missing_root(self, runner, tmp_path):
        """Test that click rejects a root that does not exist."""
        result = runner.invoke(rustified_cli, [str(tmp_path / "missing")])
        assert result.exit_code == 2

    def test_interrupt(self, runner, tmp_path, monkeypatch):
        """Test that Ctrl-C exits with code 130."""
        def interrupted(self, root):
            raise KeyboardInterrupt
            yield

        monkeypatch.setattr(RustifiedEngine, "scan_tree", interrupted)
        result = runner.invoke(rustified_cli, [str(tmp_path)])
        assert result.exit_code == 130
