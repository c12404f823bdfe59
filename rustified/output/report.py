"""
Rustified Report Generator
===========================

Serialises a :class:`ScanSummary` to JSON for machine consumption: run
metadata, the counters, every flagged file with its cause, and every
file whose container turned out to be corrupt.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rustified import __version__
from rustified.core.models import ScanSummary


class ReportGenerator:
    """Build JSON reports from scan summaries.

    Usage::

        generator = ReportGenerator()
        click.echo(generator.to_json(summary))
        generator.generate_json(summary, "report.json")
    """

    def build(self, summary: ScanSummary) -> dict[str, Any]:
        """Return the report as a plain dictionary."""
        return {
            "report_type": "rustified_scan",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "root": summary.root,
            "markers": list(summary.markers),
            "started_at": summary.start_time.isoformat(),
            "finished_at": summary.end_time.isoformat() if summary.end_time else None,
            "duration_seconds": summary.duration_seconds,
            "counters": {
                "files_scanned": summary.files_scanned,
                "elf": summary.elf_count,
                "pe": summary.pe_count,
                "unknown": summary.unknown_count,
                "unreadable": summary.unreadable_count,
                "skipped": summary.skipped_count,
                "corrupt": summary.error_count,
                "evidence": summary.evidence_count,
            },
            "evidence": [
                {
                    "path": r.path,
                    "format": r.kind.value,
                    "cause": r.verdict.cause,
                }
                for r in summary.evidence
            ],
            "errors": [
                r.model_dump(mode="json", include={"path", "kind", "error"})
                for r in summary.errors
            ],
        }

    def to_json(self, summary: ScanSummary) -> str:
        return json.dumps(self.build(summary), indent=2, ensure_ascii=False, default=str)

    def generate_json(self, summary: ScanSummary, output_path: str) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json(summary))
            f.write("\n")

        return str(path.resolve())
