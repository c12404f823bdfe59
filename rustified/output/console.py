"""
Rustified Console Output
=========================

Two displays share the terminal:

- :class:`VerdictPrinter` writes one ``<path> (<cause>)`` line per
  flagged file to stdout.  Nothing else ever goes to stdout.
- :class:`SummaryDisplay` renders the end-of-run counters as a Rich
  table on stderr through :class:`shared.console.RustifiedConsole`.

References:
    - Click documentation: https://click.palletsprojects.com/
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

import click

from shared.console import RustifiedConsole

from rustified.core.models import ScanRecord, ScanSummary


class VerdictPrinter:
    """Streams evidence lines to stdout as records arrive.

    Records without evidence are ignored, so the printer can be fed every
    record of a walk.
    """

    def __init__(self) -> None:
        self._printed = 0

    @property
    def printed(self) -> int:
        return self._printed

    def emit(self, record: ScanRecord) -> bool:
        """Print *record* if it carries evidence; return whether it did."""
        if not record.verdict.found:
            return False
        click.echo(record.report_line())
        self._printed += 1
        return True


class SummaryDisplay:
    """Rich summary of a finished walk."""

    def __init__(self, console: RustifiedConsole | None = None) -> None:
        self._console = console or RustifiedConsole()

    def display(self, summary: ScanSummary) -> None:
        con = self._console
        con.blank()
        con.section("Rustified Scan Summary")

        rows = [
            ("Root", summary.root),
            ("Markers", ", ".join(summary.markers)),
            ("Files scanned", summary.files_scanned),
            ("ELF", summary.elf_count),
            ("PE", summary.pe_count),
            ("Unknown", summary.unknown_count),
            ("Unreadable", summary.unreadable_count),
            ("Skipped (size)", summary.skipped_count),
            ("Corrupt", summary.error_count),
            ("With evidence", summary.evidence_count),
        ]
        duration = summary.duration_seconds
        caption = f"{duration:.2f}s" if duration is not None else None
        con.table(
            "Counters",
            ["Metric", "Value"],
            rows,
            caption=caption,
            styles=["bold bright_white", "bright_cyan"],
        )

        if summary.errors:
            con.table(
                "Corrupt containers",
                ["Path", "Format", "Error"],
                [(r.path, r.kind.value, r.error) for r in summary.errors],
                styles=["bright_white", "dim white", "yellow"],
            )

        if summary.evidence_count:
            con.warning(
                f"{summary.evidence_count} file(s) show evidence of the Rust runtime"
            )
        else:
            con.success("No Rust runtime markers found")
