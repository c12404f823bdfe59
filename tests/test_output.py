"""Tests for report lines, the summary table and JSON reports."""

import json

from shared.console import RustifiedConsole

from rustified.core.models import ContainerKind, ScanRecord, ScanSummary, Verdict
from rustified.output.console import SummaryDisplay, VerdictPrinter
from rustified.output.report import ReportGenerator


def _summary():
    summary = ScanSummary(root="./bin", markers=["rust_panic", "rust_eh_personality"])
    summary.add(ScanRecord(path="./bin/a", kind=ContainerKind.ELF,
                           verdict=Verdict.function_found("rust_panic")))
    summary.add(ScanRecord(path="./bin/b", kind=ContainerKind.PE,
                           error="section '.data' raw data out of range"))
    summary.add(ScanRecord(path="./bin/c"))
    return summary.finalize()


class TestVerdictPrinter:
    """Tests for VerdictPrinter."""

    def test_only_evidence_is_printed(self, capsys):
        """Test that no-evidence records produce no output."""
        printer = VerdictPrinter()
        assert printer.emit(ScanRecord(path="x", verdict=Verdict.function_found("rust_panic")))
        assert not printer.emit(ScanRecord(path="y"))
        assert capsys.readouterr().out == 'x (function "rust_panic" is found)\n'
        assert printer.printed == 1


class TestSummaryDisplay:
    """Tests for SummaryDisplay."""

    def test_renders_counters(self):
        """Test that counters and corrupt files appear in the table."""
        console = RustifiedConsole(record=True)
        SummaryDisplay(console=console).display(_summary())
        text = console.rich.export_text()
        assert "Files scanned" in text
        assert "./bin/b" in text
        assert "1 file(s) show evidence" in text


class TestReportGenerator:
    """Tests for ReportGenerator."""

    def test_build(self):
        """Test the report structure."""
        report = ReportGenerator().build(_summary())
        assert report["counters"] == {
            "files_scanned": 3,
            "elf": 1,
            "pe": 1,
            "unknown": 1,
            "unreadable": 0,
            "skipped": 0,
            "corrupt": 1,
            "evidence": 1,
        }
        assert report["evidence"] == [
            {"path": "./bin/a", "format": "elf", "cause": 'function "rust_panic" is found'},
        ]
        assert report["errors"][0]["kind"] == "pe"

    def test_generate_json(self, tmp_path):
        """Test that the report file round-trips through json."""
        path = ReportGenerator().generate_json(_summary(), str(tmp_path / "out" / "r.json"))
        data = json.loads(open(path, encoding="utf-8").read())
        assert data["root"] == "./bin"
        assert data["duration_seconds"] >= 0
