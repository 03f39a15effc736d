"""
CLI Command Handlers Facade.

Re-exports the handlers from `barrel_migrator.cli.handlers` so the dispatcher
depends on a single module.
"""

from barrel_migrator.cli.handlers.migrate import handle_migrate
from barrel_migrator.cli.handlers.scan import handle_scan

__all__ = ["handle_migrate", "handle_scan"]
