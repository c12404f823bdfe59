"""
PE/COFF Container Parser
=========================

Manual struct-based reader for the Portable Executable (PE) format used by
Windows executables (.exe), libraries (.dll) and drivers (.sys).

The reader follows the on-disk layout only: DOS header, ``PE\\0\\0``
signature, COFF file header, the optional-header magic (PE32 or PE32+) and
the section table.  Section contents are read straight from the file buffer
through each header's ``PointerToRawData`` / ``SizeOfRawData`` pair; no
image mapping or RVA translation is performed.

Opening a buffer (:meth:`PEParser.parse`) doubles as the PE check used by
the container classifier: it succeeds only when the section table is
readable.

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
      https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
    - Pietrek, M. (1994). Peering Inside the PE: A Tour of the Win32
      Portable Executable File Format. Microsoft Systems Journal.
"""

from __future__ import annotations

import struct
from typing import Iterator, Optional

from rustified.parsers.errors import SectionBoundsError


# ---------------------------------------------------------------------------
# PE Constants
# ---------------------------------------------------------------------------

MZ_MAGIC: bytes = b"MZ"
PE_MAGIC: bytes = b"PE\x00\x00"

DOS_HEADER_SIZE: int = 64
E_LFANEW_OFFSET: int = 0x3C
COFF_HEADER_SIZE: int = 20
SECTION_HEADER_SIZE: int = 40  # IMAGE_SECTION_HEADER is always 40 bytes
SECTION_NAME_SIZE: int = 8

# Optional header magic
PE32_MAGIC: int = 0x10B      # PE32 (32-bit)
PE32PLUS_MAGIC: int = 0x20B  # PE32+ (64-bit)


# ---------------------------------------------------------------------------
# Parsed structures
# ---------------------------------------------------------------------------

class _COFFHeader:
    """Parsed COFF file header."""
    __slots__ = (
        "machine", "number_of_sections", "time_date_stamp",
        "pointer_to_symbol_table", "number_of_symbols",
        "size_of_optional_header", "characteristics",
    )

    def __init__(self) -> None:
        self.machine: int = 0
        self.number_of_sections: int = 0
        self.time_date_stamp: int = 0
        self.pointer_to_symbol_table: int = 0
        self.number_of_symbols: int = 0
        self.size_of_optional_header: int = 0
        self.characteristics: int = 0


class PESection:
    """Parsed PE section header.

    ``raw_name`` keeps the eight on-disk bytes; ``name`` is the decoded
    form, or ``None`` when the bytes before the first NUL are not valid
    UTF-8.
    """
    __slots__ = (
        "raw_name", "name", "virtual_size", "virtual_address",
        "size_of_raw_data", "pointer_to_raw_data",
        "pointer_to_relocations", "pointer_to_linenumbers",
        "number_of_relocations", "number_of_linenumbers",
        "characteristics",
    )

    def __init__(self) -> None:
        self.raw_name: bytes = b""
        self.name: Optional[str] = None
        self.virtual_size: int = 0
        self.virtual_address: int = 0
        self.size_of_raw_data: int = 0
        self.pointer_to_raw_data: int = 0
        self.pointer_to_relocations: int = 0
        self.pointer_to_linenumbers: int = 0
        self.number_of_relocations: int = 0
        self.number_of_linenumbers: int = 0
        self.characteristics: int = 0


# ---------------------------------------------------------------------------
# PE Parser
# ---------------------------------------------------------------------------

class PEParser:
    """Manual struct-based PE/COFF container reader.

    Usage::

        parser = PEParser(raw_bytes)
        if parser.parse():
            for section in parser.sections:
                if section.name == ".data":
                    payload = parser.read_section(section)
    """

    def __init__(self, data: bytes) -> None:
        """Initialise the parser with raw binary data.

        Args:
            data: Complete file contents.
        """
        self._data: bytes = data
        self._e_lfanew: int = 0
        self._coff_header: _COFFHeader = _COFFHeader()
        self._optional_magic: int = 0
        self._sections: list[PESection] = []
        self._parsed: bool = False

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> bool:
        """Open the buffer as a PE container and read its section table.

        Returns:
            ``True`` if the headers are valid and the section table lies
            inside the buffer, ``False`` otherwise.  Never raises on
            malformed input.
        """
        if len(self._data) < DOS_HEADER_SIZE:
            return False
        if self._data[:2] != MZ_MAGIC:
            return False

        try:
            self._e_lfanew = struct.unpack_from("<I", self._data, E_LFANEW_OFFSET)[0]
            if not self._verify_pe_signature():
                return False
            self._parse_coff_header()
            self._parse_optional_header_magic()
            self._parse_section_table()
        except (struct.error, IndexError, ValueError):
            return False

        self._parsed = True
        return True

    @property
    def is_pe32plus(self) -> bool:
        return self._optional_magic == PE32PLUS_MAGIC

    @property
    def machine(self) -> int:
        return self._coff_header.machine

    @property
    def sections(self) -> list[PESection]:
        """Parsed section headers, in table order."""
        return list(self._sections)

    def sections_named(self, name: str) -> Iterator[PESection]:
        """Yield the sections whose decoded name equals *name* exactly."""
        for sec in self._sections:
            if sec.name == name:
                yield sec

    def read_section(self, section: PESection) -> bytes:
        """Return the raw bytes a section header points at in the file.

        Raises:
            SectionBoundsError: If the declared range runs past the buffer.
        """
        start = section.pointer_to_raw_data
        end = start + section.size_of_raw_data
        if end > len(self._data):
            raise SectionBoundsError(
                section.name if section.name is not None else repr(section.raw_name),
                start,
                section.size_of_raw_data,
                len(self._data),
            )
        return self._data[start:end]

    # ------------------------------------------------------------------ #
    #  Headers
    # ------------------------------------------------------------------ #

    def _verify_pe_signature(self) -> bool:
        """Verify the ``PE\\0\\0`` signature at offset e_lfanew."""
        pe_offset = self._e_lfanew
        if pe_offset + 4 > len(self._data):
            return False
        return self._data[pe_offset:pe_offset + 4] == PE_MAGIC

    def _parse_coff_header(self) -> None:
        """Parse the COFF file header (20 bytes after PE signature)."""
        offset = self._e_lfanew + 4
        coff = self._coff_header
        (
            coff.machine,
            coff.number_of_sections,
            coff.time_date_stamp,
            coff.pointer_to_symbol_table,
            coff.number_of_symbols,
            coff.size_of_optional_header,
            coff.characteristics,
        ) = struct.unpack_from("<HHIIIHH", self._data, offset)

    def _parse_optional_header_magic(self) -> None:
        """Check the optional header identifies a PE32 or PE32+ image.

        Object files carry no optional header and are accepted as-is.
        """
        if self._coff_header.size_of_optional_header == 0:
            return
        offset = self._e_lfanew + 4 + COFF_HEADER_SIZE
        self._optional_magic = struct.unpack_from("<H", self._data, offset)[0]
        if self._optional_magic not in (PE32_MAGIC, PE32PLUS_MAGIC):
            raise ValueError(f"unknown optional header magic {self._optional_magic:#x}")

    # ------------------------------------------------------------------ #
    #  Section table
    # ------------------------------------------------------------------ #

    def _parse_section_table(self) -> None:
        """Parse the section table immediately following the optional header."""
        offset = (
            self._e_lfanew
            + 4  # PE signature
            + COFF_HEADER_SIZE
            + self._coff_header.size_of_optional_header
        )
        count = self._coff_header.number_of_sections
        if offset + count * SECTION_HEADER_SIZE > len(self._data):
            raise ValueError("section table truncated")

        for i in range(count):
            sec_offset = offset + i * SECTION_HEADER_SIZE
            sec = PESection()

            # Name: 8 bytes, NUL-padded
            sec.raw_name = self._data[sec_offset:sec_offset + SECTION_NAME_SIZE]
            sec.name = self._decode_name(sec.raw_name)

            (
                sec.virtual_size,
                sec.virtual_address,
                sec.size_of_raw_data,
                sec.pointer_to_raw_data,
                sec.pointer_to_relocations,
                sec.pointer_to_linenumbers,
                sec.number_of_relocations,
                sec.number_of_linenumbers,
                sec.characteristics,
            ) = struct.unpack_from("<IIIIIIHHI", self._data, sec_offset + SECTION_NAME_SIZE)

            self._sections.append(sec)

    @staticmethod
    def _decode_name(raw: bytes) -> Optional[str]:
        try:
            return raw.split(b"\x00", 1)[0].decode("utf-8")
        except UnicodeDecodeError:
            return None
