"""
Rustified Shared Module
========================

Configuration, logging and console plumbing used by the rustified
scanner and its CLI.
"""

from shared.config import DEFAULT_MARKERS, RustifiedConfig

__all__ = ["DEFAULT_MARKERS", "RustifiedConfig"]
