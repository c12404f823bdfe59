"""
PE Section Scan
================

Looks for runtime markers in the raw bytes of a PE container's ``.data``
sections.

Only sections named exactly ``.data`` are read (no prefix or case-folded
matches such as ``.data$r`` or ``.DATA``).  Raw bytes carry no symbol
boundaries, so the reported cause names the marker literal itself.
"""

from __future__ import annotations

import logging

from rustified.analyzers.markers import MarkerSet
from rustified.core.models import Verdict
from rustified.parsers.pe_parser import PEParser

logger = logging.getLogger("rustified.analyzers.sections")

DATA_SECTION: str = ".data"


def scan_sections(data: bytes, markers: MarkerSet) -> Verdict:
    """Scan a PE buffer's ``.data`` sections for runtime markers.

    Sections are visited in table order and markers in set order; the
    first hit ends the scan, even if more ``.data`` sections follow.

    Args:
        data: Complete file contents, already classified as PE.
        markers: Marker set to search for.

    Returns:
        ``Verdict.function_found(<marker>)`` on the first hit, otherwise
        ``Verdict.nothing()``.

    Raises:
        SectionBoundsError: A ``.data`` header points outside the file.
    """
    parser = PEParser(data)
    if not parser.parse():
        return Verdict.nothing()

    for section in parser.sections_named(DATA_SECTION):
        raw = parser.read_section(section)
        logger.debug(
            "Scanning %s at %#x (%d bytes)",
            DATA_SECTION, section.pointer_to_raw_data, len(raw),
        )
        marker = markers.first_in_bytes(raw)
        if marker is not None:
            return Verdict.function_found(marker)

    return Verdict.nothing()
