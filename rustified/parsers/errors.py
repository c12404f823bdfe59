"""
Container Inconsistency Errors
===============================

Exceptions raised when a container that *did* parse turns out to reference
data it does not hold -- a symbol whose name offset falls outside its string
table, or a section whose raw-data range runs past the end of the file.

These are not "no evidence" outcomes.  They signal a corrupt or crafted
binary and are fatal for the single file being scanned; the traversal layer
catches them and moves on to the next file.
"""

from __future__ import annotations


class ContainerInconsistencyError(ValueError):
    """Base class for internal table inconsistencies in a parsed container."""


class StringTableError(ContainerInconsistencyError):
    """A symbol references a string-table offset absent from the table."""

    def __init__(self, offset: int, table_size: int) -> None:
        self.offset = offset
        self.table_size = table_size
        super().__init__(
            f"string table offset {offset:#x} out of range "
            f"(table size {table_size:#x})"
        )


class SectionBoundsError(ContainerInconsistencyError):
    """A section header declares raw data outside the file buffer."""

    def __init__(self, name: str, offset: int, size: int, buffer_size: int) -> None:
        self.name = name
        self.offset = offset
        self.size = size
        self.buffer_size = buffer_size
        super().__init__(
            f"section {name!r} raw data [{offset:#x}, {offset + size:#x}) "
            f"exceeds file size {buffer_size:#x}"
        )
