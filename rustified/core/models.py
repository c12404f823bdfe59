"""
Rustified Data Models
======================

Pydantic models for the per-file outcome of a provenance scan and for the
aggregate of a whole run.

:class:`ContainerKind` and :class:`Verdict` are tagged variants: a kind
enum plus (for verdicts) a payload that is present exactly when the kind
says so.  Verdicts are frozen once built.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import datetime as _dt
import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ContainerKind(str, enum.Enum):
    """Container formats the classifier can recognise."""
    ELF = "elf"
    PE = "pe"
    UNKNOWN = "unknown"


class VerdictKind(str, enum.Enum):
    """Whether runtime markers were found in a file."""
    EVIDENCE = "evidence"
    NO_EVIDENCE = "no_evidence"


# ---------------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------------

class Verdict(BaseModel):
    """Outcome of scanning a single file.

    Attributes:
        kind: :attr:`VerdictKind.EVIDENCE` or :attr:`VerdictKind.NO_EVIDENCE`.
        cause: Human-readable reason, set only for evidence verdicts.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    kind: VerdictKind = VerdictKind.NO_EVIDENCE
    cause: Optional[str] = Field(
        default=None,
        description="Why the file was flagged (evidence only)",
    )

    @model_validator(mode="after")
    def _check_payload(self) -> Verdict:
        if self.kind is VerdictKind.EVIDENCE and not self.cause:
            raise ValueError("an evidence verdict needs a cause")
        if self.kind is VerdictKind.NO_EVIDENCE and self.cause is not None:
            raise ValueError("a no-evidence verdict carries no cause")
        return self

    @classmethod
    def evidence(cls, cause: str) -> Verdict:
        return cls(kind=VerdictKind.EVIDENCE, cause=cause)

    @classmethod
    def function_found(cls, name: str) -> Verdict:
        """Evidence verdict worded ``function "<name>" is found``."""
        return cls.evidence(f'function "{name}" is found')

    @classmethod
    def nothing(cls) -> Verdict:
        return cls(kind=VerdictKind.NO_EVIDENCE)

    @property
    def found(self) -> bool:
        return self.kind is VerdictKind.EVIDENCE


# ---------------------------------------------------------------------------
# Per-file and per-run records
# ---------------------------------------------------------------------------

class ScanRecord(BaseModel):
    """One processed file.

    Attributes:
        path: Path as produced by the directory walk.
        kind: Container classification (``UNKNOWN`` when unreadable).
        verdict: Scan verdict.
        unreadable: ``True`` if the file could not be read.
        skipped: ``True`` if the file was over the configured size limit.
        error: Text of an inconsistency error that aborted this file.
    """

    path: str
    kind: ContainerKind = ContainerKind.UNKNOWN
    verdict: Verdict = Field(default_factory=Verdict.nothing)
    unreadable: bool = False
    skipped: bool = False
    error: Optional[str] = None

    def report_line(self) -> str:
        """``<path> (<cause>)`` for evidence records."""
        return f"{self.path} ({self.verdict.cause})"


class ScanSummary(BaseModel):
    """Counters and evidence collected over one directory walk."""

    model_config = ConfigDict(validate_assignment=True)

    root: str
    markers: list[str] = Field(default_factory=list)
    start_time: _dt.datetime = Field(
        default_factory=lambda: _dt.datetime.now(_dt.timezone.utc),
    )
    end_time: Optional[_dt.datetime] = None
    files_scanned: int = 0
    elf_count: int = 0
    pe_count: int = 0
    unknown_count: int = 0
    unreadable_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    evidence: list[ScanRecord] = Field(default_factory=list)
    errors: list[ScanRecord] = Field(default_factory=list)

    @property
    def evidence_count(self) -> int:
        return len(self.evidence)

    @property
    def duration_seconds(self) -> float | None:
        """Elapsed time in seconds, or ``None`` while the walk is running."""
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    def add(self, record: ScanRecord) -> None:
        """Fold one file's record into the counters."""
        self.files_scanned += 1
        if record.unreadable:
            self.unreadable_count += 1
        elif record.skipped:
            self.skipped_count += 1
        elif record.kind is ContainerKind.ELF:
            self.elf_count += 1
        elif record.kind is ContainerKind.PE:
            self.pe_count += 1
        else:
            self.unknown_count += 1

        if record.error is not None:
            self.error_count += 1
            self.errors.append(record)
        if record.verdict.found:
            self.evidence.append(record)

    def finalize(self) -> ScanSummary:
        self.end_time = _dt.datetime.now(_dt.timezone.utc)
        return self
