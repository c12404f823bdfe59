"""
Rustified Analyzers
====================

- ``markers``  -- marker set and subsequence matching
- ``symbols``  -- ELF symbol-table scan
- ``sections`` -- PE ``.data`` section scan
"""
