"""
Rustified Console Interface
============================

Rich-powered console abstraction for everything the CLI says *about* a
scan: status messages, errors and the summary table.

The console writes to stderr so that stdout carries nothing but the
``<path> (<cause>)`` report lines and can be piped safely.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

_RUSTIFIED_THEME = Theme(
    {
        "rustified.section": "bold bright_magenta",
        "rustified.success": "bold green",
        "rustified.warning": "bold yellow",
        "rustified.error": "bold red",
    }
)


class RustifiedConsole:
    """Unified stderr console for the rustified CLI.

    Usage::

        con = RustifiedConsole()
        con.section("Summary")
        con.error("Configuration file not found")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording for export.
        """
        self._console = Console(
            theme=_RUSTIFIED_THEME,
            stderr=True,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Section header
    # ------------------------------------------------------------------ #

    def section(self, title: str) -> None:
        """Print a section header rule."""
        self._console.rule(
            f"  {title}  ",
            style="rustified.section",
            characters="─",
        )

    # ------------------------------------------------------------------ #
    #  Message helpers
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(
            f"[rustified.success][✔] SUCCESS:[/rustified.success] {message}"
        )

    def warning(self, message: str) -> None:
        self._console.print(
            f"[rustified.warning][⚠] WARNING:[/rustified.warning] {message}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[rustified.error][✘] ERROR:[/rustified.error] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Iterable of row tuples; each element is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def blank(self, count: int = 1) -> None:
        """Print *count* blank lines."""
        for _ in range(count):
            self._console.print()
