import logging

import pytest

from binary_builders import build_elf, build_pe
from rustified.analyzers.markers import MarkerSet
from shared.logger import ROOT_LOGGER_NAME

RUST_PANIC_SYMBOL = "_ZN3std9panicking11rust_panic17h5a2c9b0d3e4f6a7bE"


@pytest.fixture
def markers() -> MarkerSet:
    """The default marker set."""
    return MarkerSet()


@pytest.fixture
def rust_elf() -> bytes:
    """ELF64 whose static symbol table names a Rust panic routine."""
    return build_elf(symtab=["_start", "main", RUST_PANIC_SYMBOL])


@pytest.fixture
def clean_elf() -> bytes:
    """ELF64 with both tables and no runtime markers."""
    return build_elf(symtab=["_start", "main"], dynsym=["printf", "malloc"])


@pytest.fixture
def rust_pe() -> bytes:
    """PE32+ whose ``.data`` section embeds ``rust_eh_personality``."""
    return build_pe([
        (".text", b"\x55\x48\x89\xe5\xc3"),
        (".data", b"\x00\x01rust_eh_personality\x00\x02"),
    ])


@pytest.fixture
def clean_pe() -> bytes:
    """PE32+ with a ``.data`` section holding nothing of interest."""
    return build_pe([(".text", b"\xc3"), (".data", b"hello, world\x00")])


@pytest.fixture(autouse=True)
def reset_rustified_logging():
    """Undo handler changes made by the CLI's logging setup."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
