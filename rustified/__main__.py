"""
Rustified Module Entry Point
=============================

Allows running the Rustified CLI via: python -m rustified
"""

from rustified.cli import main

if __name__ == "__main__":
    main()
