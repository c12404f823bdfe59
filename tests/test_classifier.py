"""Tests for ELF/PE container classification."""

import pytest

from binary_builders import build_elf, build_pe
from rustified.core.models import ContainerKind
from rustified.parsers import magic
from rustified.parsers.magic import classify, is_elf, is_pe


class TestClassify:
    """Tests for classify()."""

    def test_elf(self, rust_elf):
        """Test that a well-formed ELF classifies as ELF."""
        assert classify(rust_elf) is ContainerKind.ELF
        assert is_elf(rust_elf)
        assert not is_pe(rust_elf)

    def test_pe(self, rust_pe):
        """Test that a well-formed PE classifies as PE."""
        assert classify(rust_pe) is ContainerKind.PE
        assert is_pe(rust_pe)
        assert not is_elf(rust_pe)

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"\x7f",
            b"MZ",
            b"This is a plain text file that mentions rust_panic.\n",
            b"\x7fELF" + bytes(12),
            bytes(4096),
        ],
    )
    def test_unknown(self, data):
        """Test that empty, short and non-container buffers are UNKNOWN."""
        assert classify(data) is ContainerKind.UNKNOWN

    def test_truncated_elf_is_unknown(self):
        """Test that a truncated ELF is not misread as anything."""
        assert classify(build_elf(symtab=["main"])[:40]) is ContainerKind.UNKNOWN

    def test_truncated_pe_is_unknown(self):
        """Test that a PE cut inside its section table is UNKNOWN."""
        data = build_pe([(".text", b"\xc3"), (".data", b"x")])
        assert classify(data[:0x80 + 4 + 20 + 240 + 20]) is ContainerKind.UNKNOWN

    def test_elf_check_short_circuits(self, monkeypatch, rust_elf):
        """Test that the PE check never runs once the ELF check succeeds."""
        # \x7fELF and MZ cannot both start one buffer, so real inputs never
        # tell the order apart; a PE parser that accepts anything does
        calls = []

        class SpyPEParser:
            def __init__(self, data):
                calls.append(data)

            def parse(self):
                return True

        monkeypatch.setattr(magic, "PEParser", SpyPEParser)
        assert classify(rust_elf) is ContainerKind.ELF
        assert calls == []
        assert classify(b"not an elf") is ContainerKind.PE
        assert calls == [b"not an elf"]

    def test_pure(self, rust_elf, rust_pe):
        """Test that classification is repeatable."""
        for data in (rust_elf, rust_pe, b"text"):
            assert classify(data) is classify(data)
