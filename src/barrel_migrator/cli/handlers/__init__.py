"""
Command Handlers.

Each module implements one sub-command of the ``barrel-migrator`` CLI.
"""

from .migrate import handle_migrate
from .scan import handle_scan
