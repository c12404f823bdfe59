"""
Rustified -- Rust Runtime Provenance Scanner
=============================================

Rustified walks a directory tree and reports executables that show
evidence of having been built with the Rust toolchain.  The evidence is
circumstantial: a runtime marker such as ``rust_panic`` appearing in an
ELF symbol name or in the raw bytes of a PE ``.data`` section.

Capabilities:
    - ELF / PE classification from magic numbers and header sanity checks
    - ELF static symbol table scan, falling back to the dynamic table
    - PE ``.data`` section byte scan
    - Configurable marker set (TOML config and ``--marker``)
    - Threaded directory walk with ordered output
    - Rich summary table and JSON reports

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linking Format (ELF) Specification, Version 1.2.
    - Microsoft. (2024). PE Format.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
