"""
Rustified Parsers
==================

Container readers and the ELF/PE classifier.

- ``elf_parser`` -- ELF header, section and symbol tables
- ``pe_parser``  -- PE/COFF headers and section table
- ``magic``      -- container classification
- ``errors``     -- inconsistency errors raised while scanning a parsed container
"""

from rustified.parsers.elf_parser import ELFParser, StringTable
from rustified.parsers.errors import (
    ContainerInconsistencyError,
    SectionBoundsError,
    StringTableError,
)
from rustified.parsers.magic import classify
from rustified.parsers.pe_parser import PEParser

__all__ = [
    "ELFParser",
    "PEParser",
    "StringTable",
    "classify",
    "ContainerInconsistencyError",
    "SectionBoundsError",
    "StringTableError",
]
