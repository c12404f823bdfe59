"""
Container Classification
=========================

Decides whether a byte buffer is an ELF container, a PE container, or
neither.  File extensions are never consulted.

Unlike a leading-bytes signature match, each check actually opens the
buffer with the corresponding parser, so a file that merely starts with
``MZ`` or ``\\x7fELF`` but has truncated or nonsensical header tables is
classified :attr:`ContainerKind.UNKNOWN`.

The ELF check always runs first and short-circuits: a buffer accepted as
ELF is never offered to the PE check.
"""

from __future__ import annotations

from rustified.core.models import ContainerKind
from rustified.parsers.elf_parser import ELFParser
from rustified.parsers.pe_parser import PEParser


def is_elf(data: bytes) -> bool:
    """Return ``True`` when *data* opens as an ELF container."""
    return ELFParser(data).parse()


def is_pe(data: bytes) -> bool:
    """Return ``True`` when *data* opens as PE and its section table is readable."""
    return PEParser(data).parse()


def classify(data: bytes) -> ContainerKind:
    """Classify a raw file buffer.

    Malformed or truncated input is a negative classification, never an
    error.

    Args:
        data: Complete file contents.

    Returns:
        :attr:`ContainerKind.ELF`, :attr:`ContainerKind.PE` or
        :attr:`ContainerKind.UNKNOWN`.
    """
    if is_elf(data):
        return ContainerKind.ELF
    if is_pe(data):
        return ContainerKind.PE
    return ContainerKind.UNKNOWN
