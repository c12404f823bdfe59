"""
ELF Container Parser
=====================

Manual struct-based reader for the Executable and Linkable Format (ELF),
the binary format of Linux, the BSDs and most other Unix-like systems.

Only the parts needed to find symbol names are decoded: the file header,
the section header table, the section name string table, and the
``.symtab`` / ``.dynsym`` symbol tables together with their linked string
tables.  Both ELF32 and ELF64 in either byte order are supported.

Opening a buffer (:meth:`ELFParser.parse`) doubles as the ELF check used by
the container classifier: it succeeds only when every header table the file
declares actually lies inside the buffer.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1, chapter 4.
    - Linux man page: elf(5).
"""

from __future__ import annotations

import struct
from typing import Iterator, Optional

from rustified.parsers.errors import StringTableError


# ---------------------------------------------------------------------------
# ELF Constants
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"
EI_NIDENT: int = 16
EI_CLASS: int = 4
EI_DATA: int = 5

# ELF Class (32-bit vs 64-bit)
ELFCLASS32: int = 1
ELFCLASS64: int = 2

# Data encoding (endianness)
ELFDATA2LSB: int = 1  # Little-endian
ELFDATA2MSB: int = 2  # Big-endian

# Section header types
SHT_NULL: int = 0
SHT_PROGBITS: int = 1
SHT_SYMTAB: int = 2
SHT_STRTAB: int = 3
SHT_NOBITS: int = 8
SHT_DYNSYM: int = 11

# Special section indices
SHN_UNDEF: int = 0
SHN_XINDEX: int = 0xFFFF

# Structure sizes
ELF32_EHDR_SIZE: int = 52
ELF64_EHDR_SIZE: int = 64
ELF32_PHDR_SIZE: int = 32
ELF64_PHDR_SIZE: int = 56
ELF32_SHDR_SIZE: int = 40
ELF64_SHDR_SIZE: int = 64
ELF32_SYM_SIZE: int = 16
ELF64_SYM_SIZE: int = 24


# ---------------------------------------------------------------------------
# Parsed structures
# ---------------------------------------------------------------------------

class _ELFHeader:
    """Parsed ELF header fields."""
    __slots__ = (
        "ei_class", "ei_data",
        "e_type", "e_machine", "e_version", "e_entry",
        "e_phoff", "e_shoff", "e_flags", "e_ehsize",
        "e_phentsize", "e_phnum", "e_shentsize", "e_shnum",
        "e_shstrndx",
    )

    def __init__(self) -> None:
        self.ei_class: int = 0
        self.ei_data: int = 0
        self.e_type: int = 0
        self.e_machine: int = 0
        self.e_version: int = 0
        self.e_entry: int = 0
        self.e_phoff: int = 0
        self.e_shoff: int = 0
        self.e_flags: int = 0
        self.e_ehsize: int = 0
        self.e_phentsize: int = 0
        self.e_phnum: int = 0
        self.e_shentsize: int = 0
        self.e_shnum: int = 0
        self.e_shstrndx: int = 0


class ElfSection:
    """Parsed section header entry."""
    __slots__ = (
        "sh_name", "sh_type", "sh_flags", "sh_addr",
        "sh_offset", "sh_size", "sh_link", "sh_info",
        "sh_addralign", "sh_entsize", "name",
    )

    def __init__(self) -> None:
        self.sh_name: int = 0
        self.sh_type: int = 0
        self.sh_flags: int = 0
        self.sh_addr: int = 0
        self.sh_offset: int = 0
        self.sh_size: int = 0
        self.sh_link: int = 0
        self.sh_info: int = 0
        self.sh_addralign: int = 0
        self.sh_entsize: int = 0
        self.name: str = ""


class ElfSymbol:
    """One symbol table entry.

    Only ``st_name`` matters to the scanner; the remaining fields are kept
    so a symbol can be inspected while debugging a verdict.
    """
    __slots__ = (
        "st_name", "st_value", "st_size", "st_info",
        "st_other", "st_shndx",
    )

    def __init__(self) -> None:
        self.st_name: int = 0
        self.st_value: int = 0
        self.st_size: int = 0
        self.st_info: int = 0
        self.st_other: int = 0
        self.st_shndx: int = 0


class StringTable:
    """A string-table section: NUL-terminated names addressed by byte offset.

    Offsets come from symbol entries of the same file.  An offset outside
    the table is a broken link between the two sections, so :meth:`get`
    raises :class:`StringTableError` instead of returning an empty name.
    """
    __slots__ = ("_data",)

    def __init__(self, data: bytes) -> None:
        self._data = data

    def __len__(self) -> int:
        return len(self._data)

    def get(self, offset: int) -> str:
        """Return the name starting at *offset*.

        A name missing its terminator runs to the end of the table.
        Undecodable bytes are replaced rather than rejected.

        Raises:
            StringTableError: If *offset* lies outside the table.
        """
        if offset < 0 or offset >= len(self._data):
            raise StringTableError(offset, len(self._data))
        end = self._data.find(b"\x00", offset)
        if end == -1:
            end = len(self._data)
        return self._data[offset:end].decode("utf-8", errors="replace")


class SymbolTable:
    """Lazy view over the entries of a ``SHT_SYMTAB`` / ``SHT_DYNSYM`` section.

    Entries are decoded on iteration so a scan that stops at the first
    match never touches the rest of a large table.
    """
    __slots__ = ("_data", "_offset", "_count", "_entsize", "_fmt", "_is_64bit")

    def __init__(
        self,
        data: bytes,
        offset: int,
        count: int,
        entsize: int,
        endian: str,
        is_64bit: bool,
    ) -> None:
        self._data = data
        self._offset = offset
        self._count = count
        self._entsize = entsize
        self._is_64bit = is_64bit
        # Elf64_Sym: 24 bytes / Elf32_Sym: 16 bytes
        self._fmt = f"{endian}IBBHQQ" if is_64bit else f"{endian}IIIBBH"

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[ElfSymbol]:
        for i in range(self._count):
            yield self._read_entry(self._offset + i * self._entsize)

    def _read_entry(self, offset: int) -> ElfSymbol:
        sym = ElfSymbol()
        fields = struct.unpack_from(self._fmt, self._data, offset)
        if self._is_64bit:
            (
                sym.st_name, sym.st_info, sym.st_other,
                sym.st_shndx, sym.st_value, sym.st_size,
            ) = fields
        else:
            (
                sym.st_name, sym.st_value, sym.st_size,
                sym.st_info, sym.st_other, sym.st_shndx,
            ) = fields
        return sym


# ---------------------------------------------------------------------------
# ELF Parser
# ---------------------------------------------------------------------------

class ELFParser:
    """Manual struct-based ELF container reader.

    Usage::

        parser = ELFParser(raw_bytes)
        if parser.parse():
            selected = parser.symbol_table() or parser.dynamic_symbol_table()
            if selected is not None:
                symbols, strings = selected
                for sym in symbols:
                    print(strings.get(sym.st_name))
    """

    def __init__(self, data: bytes) -> None:
        """Initialise the parser with raw binary data.

        Args:
            data: Complete file contents.
        """
        self._data: bytes = data
        self._header: _ELFHeader = _ELFHeader()
        self._sections: list[ElfSection] = []
        self._endian: str = "<"
        self._is_64bit: bool = False
        self._parsed: bool = False

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> bool:
        """Open the buffer as an ELF container.

        Returns:
            ``True`` if the header and every declared table fit the buffer,
            ``False`` for anything else.  Never raises on malformed input.
        """
        if len(self._data) < EI_NIDENT:
            return False
        if self._data[:4] != ELF_MAGIC:
            return False

        try:
            self._parse_elf_header()
            self._check_program_header_table()
            self._parse_section_headers()
            self._resolve_section_names()
        except (struct.error, IndexError, ValueError):
            return False

        self._parsed = True
        return True

    @property
    def is_64bit(self) -> bool:
        return self._is_64bit

    @property
    def endian(self) -> str:
        """``"little"`` or ``"big"``."""
        return "little" if self._endian == "<" else "big"

    @property
    def sections(self) -> list[ElfSection]:
        """Parsed section headers, in table order."""
        return list(self._sections)

    def symbol_table(self) -> Optional[tuple[SymbolTable, StringTable]]:
        """Return the static symbol table (``.symtab``) and its string table.

        Returns:
            ``(symbols, strings)``, or ``None`` when the file has no
            ``SHT_SYMTAB`` section or its linked string table is missing.
        """
        return self._symbols_of_type(SHT_SYMTAB)

    def dynamic_symbol_table(self) -> Optional[tuple[SymbolTable, StringTable]]:
        """Return the dynamic symbol table (``.dynsym``) and its string table.

        Returns:
            ``(symbols, strings)``, or ``None`` when absent.
        """
        return self._symbols_of_type(SHT_DYNSYM)

    # ------------------------------------------------------------------ #
    #  ELF header parsing
    # ------------------------------------------------------------------ #

    def _parse_elf_header(self) -> None:
        """Parse the ELF identification and file header."""
        h = self._header
        h.ei_class = self._data[EI_CLASS]
        h.ei_data = self._data[EI_DATA]

        if h.ei_class not in (ELFCLASS32, ELFCLASS64):
            raise ValueError(f"invalid ELF class {h.ei_class}")
        if h.ei_data not in (ELFDATA2LSB, ELFDATA2MSB):
            raise ValueError(f"invalid ELF data encoding {h.ei_data}")

        self._is_64bit = h.ei_class == ELFCLASS64
        self._endian = "<" if h.ei_data == ELFDATA2LSB else ">"

        if self._is_64bit:
            # ELF64 header: offsets 16..63
            fmt = f"{self._endian}HHIQQQIHHHHHH"
        else:
            # ELF32 header: offsets 16..51
            fmt = f"{self._endian}HHIIIIIHHHHHH"
        (
            h.e_type, h.e_machine, h.e_version, h.e_entry,
            h.e_phoff, h.e_shoff, h.e_flags, h.e_ehsize,
            h.e_phentsize, h.e_phnum, h.e_shentsize, h.e_shnum,
            h.e_shstrndx,
        ) = struct.unpack_from(fmt, self._data, EI_NIDENT)

    def _check_program_header_table(self) -> None:
        """Reject files whose program header table lies outside the buffer."""
        h = self._header
        if h.e_phoff == 0 or h.e_phnum == 0:
            return
        phdr_size = ELF64_PHDR_SIZE if self._is_64bit else ELF32_PHDR_SIZE
        if h.e_phentsize < phdr_size:
            raise ValueError(f"program header entry size {h.e_phentsize} too small")
        if h.e_phoff + h.e_phnum * h.e_phentsize > len(self._data):
            raise ValueError("program header table truncated")

    # ------------------------------------------------------------------ #
    #  Section header parsing
    # ------------------------------------------------------------------ #

    def _parse_section_headers(self) -> None:
        """Parse all section headers and check their data ranges."""
        h = self._header
        if h.e_shoff == 0:
            return

        shdr_size = ELF64_SHDR_SIZE if self._is_64bit else ELF32_SHDR_SIZE
        if h.e_shentsize < shdr_size:
            raise ValueError(f"section header entry size {h.e_shentsize} too small")

        count = h.e_shnum
        if count == 0:
            # Extended numbering: the real count lives in section 0's sh_size
            count = self._read_section_header(h.e_shoff).sh_size

        if h.e_shoff + count * h.e_shentsize > len(self._data):
            raise ValueError("section header table truncated")

        for i in range(count):
            self._sections.append(
                self._read_section_header(h.e_shoff + i * h.e_shentsize)
            )

        for sh in self._sections:
            if sh.sh_type in (SHT_NULL, SHT_NOBITS):
                continue
            if sh.sh_offset + sh.sh_size > len(self._data):
                raise ValueError("section data lies outside the file")

    def _read_section_header(self, offset: int) -> ElfSection:
        sh = ElfSection()
        if self._is_64bit:
            # Elf64_Shdr: 64 bytes
            fmt = f"{self._endian}IIQQQQIIQQ"
        else:
            # Elf32_Shdr: 40 bytes
            fmt = f"{self._endian}IIIIIIIIII"
        (
            sh.sh_name, sh.sh_type, sh.sh_flags, sh.sh_addr,
            sh.sh_offset, sh.sh_size, sh.sh_link, sh.sh_info,
            sh.sh_addralign, sh.sh_entsize,
        ) = struct.unpack_from(fmt, self._data, offset)
        return sh

    def _resolve_section_names(self) -> None:
        """Resolve section names from the section header string table."""
        if not self._sections:
            return

        index = self._header.e_shstrndx
        if index == SHN_XINDEX:
            index = self._sections[0].sh_link
        if index == SHN_UNDEF:
            return
        if index >= len(self._sections):
            raise ValueError(f"section name table index {index} out of range")

        names = self._section_data(self._sections[index])
        for sh in self._sections:
            sh.name = self._read_cstring(names, sh.sh_name)

    # ------------------------------------------------------------------ #
    #  Symbol tables
    # ------------------------------------------------------------------ #

    def _symbols_of_type(
        self, sh_type: int
    ) -> Optional[tuple[SymbolTable, StringTable]]:
        if not self._parsed:
            raise RuntimeError("parse() must succeed before reading symbols")

        symtab = next((sh for sh in self._sections if sh.sh_type == sh_type), None)
        if symtab is None:
            return None

        strings = self._linked_string_table(symtab)
        if strings is None:
            return None

        sym_size = ELF64_SYM_SIZE if self._is_64bit else ELF32_SYM_SIZE
        entsize = symtab.sh_entsize if symtab.sh_entsize >= sym_size else sym_size
        symbols = SymbolTable(
            self._data,
            offset=symtab.sh_offset,
            count=symtab.sh_size // entsize,
            entsize=entsize,
            endian=self._endian,
            is_64bit=self._is_64bit,
        )
        return symbols, strings

    def _linked_string_table(self, symtab: ElfSection) -> Optional[StringTable]:
        link = symtab.sh_link
        if link == SHN_UNDEF or link >= len(self._sections):
            return None
        strtab = self._sections[link]
        if strtab.sh_type != SHT_STRTAB:
            return None
        return StringTable(self._section_data(strtab))

    # ------------------------------------------------------------------ #
    #  Utility methods
    # ------------------------------------------------------------------ #

    def _section_data(self, sh: ElfSection) -> bytes:
        if sh.sh_type == SHT_NOBITS:
            return b""
        return self._data[sh.sh_offset:sh.sh_offset + sh.sh_size]

    @staticmethod
    def _read_cstring(data: bytes, offset: int) -> str:
        """Read a null-terminated C string from a byte buffer.

        Section names are informational, so an out-of-range offset yields
        an empty name here rather than an error.
        """
        if offset < 0 or offset >= len(data):
            return ""
        end = data.find(b"\x00", offset)
        if end == -1:
            end = len(data)
        return data[offset:end].decode("ascii", errors="replace")
