"""
ELF Symbol-Table Scan
======================

Looks for runtime markers in the symbol names of an ELF container.

Exactly one table is consulted per file: the static ``.symtab`` when it and
its string table are present, otherwise the dynamic ``.dynsym``.  The two
are alternatives, not a union: a static table without a match ends the scan
even if ``.dynsym`` would have matched.

The reported cause carries the *full* resolved symbol name (often a mangled
identifier that merely contains the marker).
"""

from __future__ import annotations

import logging

from rustified.analyzers.markers import MarkerSet
from rustified.core.models import Verdict
from rustified.parsers.elf_parser import ELFParser

logger = logging.getLogger("rustified.analyzers.symbols")


def scan_symbols(data: bytes, markers: MarkerSet) -> Verdict:
    """Scan an ELF buffer's symbol names for runtime markers.

    The buffer is re-opened here; nothing is reused from classification.

    Args:
        data: Complete file contents, already classified as ELF.
        markers: Marker set, tested in order against every name.

    Returns:
        ``Verdict.function_found(<symbol name>)`` for the first symbol
        containing a marker, otherwise ``Verdict.nothing()``.

    Raises:
        StringTableError: A symbol's name offset lies outside its string
            table.
    """
    parser = ELFParser(data)
    if not parser.parse():
        return Verdict.nothing()

    selected = parser.symbol_table()
    table_name = ".symtab"
    if selected is None:
        selected = parser.dynamic_symbol_table()
        table_name = ".dynsym"
    if selected is None:
        logger.debug("No usable symbol table")
        return Verdict.nothing()

    symbols, strings = selected
    logger.debug("Scanning %d entries of %s", len(symbols), table_name)

    for sym in symbols:
        name = strings.get(sym.st_name)
        if markers.first_in_name(name) is not None:
            return Verdict.function_found(name)

    return Verdict.nothing()
