"""
Entry point for module execution (``python -m cstlens``).

This module delegates execution to the CLI handler in ``cstlens.cli.__main__``.
"""

import sys
from cstlens.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
