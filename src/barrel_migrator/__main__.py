"""
Entry point for module execution (``python -m barrel_migrator``).

This module delegates execution to the CLI handler in ``barrel_migrator.cli.__main__``.
"""

import sys
from barrel_migrator.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
