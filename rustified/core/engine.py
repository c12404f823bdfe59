"""
Rustified Scan Engine
======================

Combines classification, the format-specific scans and marker matching
into one verdict per file, and drives that pipeline over a directory tree.

Pipeline per file:
    1. Read the whole file into memory
    2. Classify it as ELF, PE or unknown
    3. ELF -> symbol-table scan; PE -> ``.data`` section scan;
       unknown -> no evidence
    4. Record the verdict

Every file is independent: a read error or a corrupt container costs that
file its verdict (no evidence) and the walk continues.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Iterator, Optional

from shared.config import RustifiedConfig
from shared.logger import RustifiedLogger

from rustified.analyzers.markers import MarkerSet
from rustified.analyzers.sections import scan_sections
from rustified.analyzers.symbols import scan_symbols
from rustified.core.models import ContainerKind, ScanRecord, ScanSummary, Verdict
from rustified.parsers.errors import ContainerInconsistencyError
from rustified.parsers.magic import classify


def detect(data: bytes, markers: MarkerSet, kind: Optional[ContainerKind] = None) -> Verdict:
    """Return the verdict for one file buffer.

    Args:
        data: Complete file contents.
        markers: Marker set to search for.
        kind: Classification already computed for *data*; classified here
              when omitted.

    Raises:
        ContainerInconsistencyError: The container parsed but its tables
            reference data it does not hold.
    """
    if kind is None:
        kind = classify(data)
    if kind is ContainerKind.ELF:
        return scan_symbols(data, markers)
    if kind is ContainerKind.PE:
        return scan_sections(data, markers)
    return Verdict.nothing()


class RustifiedEngine:
    """Runs the provenance scan over single buffers, files or whole trees.

    Usage::

        engine = RustifiedEngine()
        for record in engine.scan_tree("."):
            if record.verdict.found:
                print(record.report_line())

    Or, collecting counters for a report::

        summary = engine.run(".")
    """

    def __init__(
        self,
        config: RustifiedConfig | None = None,
        logger: RustifiedLogger | None = None,
        markers: MarkerSet | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Rustified configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
            markers: Marker set; built from ``config.scan.markers`` if omitted.

        Raises:
            ValueError: If the configured markers do not form a valid set.
        """
        self._config: RustifiedConfig = config or RustifiedConfig()
        self._logger: RustifiedLogger = logger or RustifiedLogger("engine")
        self._markers: MarkerSet = markers or MarkerSet.from_iterable(
            self._config.scan.markers
        )

    @property
    def markers(self) -> MarkerSet:
        return self._markers

    # ------------------------------------------------------------------ #
    #  Single buffer / file
    # ------------------------------------------------------------------ #

    def scan_bytes(self, data: bytes) -> Verdict:
        """Verdict for an in-memory buffer (inconsistency errors propagate)."""
        return detect(data, self._markers)

    def scan_file(self, path: str | os.PathLike[str]) -> ScanRecord:
        """Read and scan one file, never raising for a bad input.

        Args:
            path: File to scan.

        Returns:
            A :class:`ScanRecord`; unreadable files, oversized files and
            corrupt containers all carry a no-evidence verdict.
        """
        display = os.fspath(path)
        max_size = self._config.scan.max_file_size

        try:
            if max_size and os.path.getsize(path) > max_size:
                self._logger.debug("Skipping %s: larger than %d bytes", display, max_size)
                return ScanRecord(path=display, skipped=True)
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError as exc:
            self._logger.debug("Cannot read %s: %s", display, exc)
            return ScanRecord(path=display, unreadable=True)

        kind = classify(data)
        try:
            verdict = detect(data, self._markers, kind)
        except ContainerInconsistencyError as exc:
            self._logger.warning("Corrupt %s container %s: %s", kind.value, display, exc)
            return ScanRecord(path=display, kind=kind, error=str(exc))

        if verdict.found:
            self._logger.debug("%s: %s", display, verdict.cause)
        return ScanRecord(path=display, kind=kind, verdict=verdict)

    # ------------------------------------------------------------------ #
    #  Traversal
    # ------------------------------------------------------------------ #

    def iter_files(self, root: str | os.PathLike[str]) -> Iterator[str]:
        """Yield every regular file under *root*, recursively.

        Entries are visited in sorted order.  Symlinked files are skipped
        and symlinked directories are not descended into unless
        ``scan.follow_symlinks`` is set.  A *root* that is itself a file
        is yielded as-is.
        """
        root = os.fspath(root)
        follow = self._config.scan.follow_symlinks

        if os.path.isfile(root):
            if follow or not os.path.islink(root):
                yield root
            return

        def _on_error(exc: OSError) -> None:
            self._logger.debug("Cannot list %s: %s", exc.filename, exc)

        for dirpath, dirnames, filenames in os.walk(
            root, onerror=_on_error, followlinks=follow
        ):
            dirnames.sort()
            for name in sorted(filenames):
                path = os.path.join(dirpath, name)
                if not follow and os.path.islink(path):
                    continue
                if os.path.isfile(path):
                    yield path

    def scan_paths(self, paths: Iterable[str]) -> Iterator[ScanRecord]:
        """Scan *paths*, yielding records in input order.

        With ``scan.workers > 1`` files are read and scanned on a thread
        pool; ordering is preserved either way.
        """
        workers = max(1, self._config.scan.workers)
        if workers == 1:
            for path in paths:
                yield self.scan_file(path)
            return

        with ThreadPoolExecutor(max_workers=workers) as pool:
            yield from pool.map(self.scan_file, paths)

    def scan_tree(self, root: str | os.PathLike[str]) -> Iterator[ScanRecord]:
        """Scan every regular file under *root*."""
        with self._logger.operation("scan_tree"):
            yield from self.scan_paths(self.iter_files(root))

    def run(
        self,
        root: str | os.PathLike[str],
        on_record: Optional[Callable[[ScanRecord], object]] = None,
    ) -> ScanSummary:
        """Scan *root* and return the aggregated :class:`ScanSummary`.

        Args:
            root: Directory (or single file) to scan.
            on_record: Called with each record as soon as it is folded into
                the summary, in walk order.  The CLI streams report lines
                through it.
        """
        summary = ScanSummary(root=os.fspath(root), markers=list(self._markers))
        with self._logger.timed(f"scan of {os.fspath(root)}"):
            for record in self.scan_tree(root):
                summary.add(record)
                if on_record is not None:
                    on_record(record)
        return summary.finalize()
