"""
Main Entry Point for barrel-migrator CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `barrel_migrator.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from barrel_migrator import __version__
from barrel_migrator.cli import commands
from barrel_migrator.config import parse_cli_patterns
from barrel_migrator.utils.console import set_verbose


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="barrel-migrator: Rewrite barrel imports into direct module imports")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: MIGRATE ---
  cmd_migrate = subparsers.add_parser("migrate", help="Rewrite imports of one or more packages")
  cmd_migrate.add_argument("source", help="Package directory or glob of package directories (e.g. 'packages/*')")
  cmd_migrate.add_argument(
    "target", nargs="?", type=Path, default=None, help="Root of the tree to rewrite (default: from toml or '.')"
  )
  cmd_migrate.add_argument(
    "--ignore-source-files",
    default=None,
    help="Comma-separated globs of package modules whose symbols stay on the package root",
  )
  cmd_migrate.add_argument(
    "--ignore-target-files", default=None, help="Comma-separated globs of consumer files to leave untouched"
  )
  cmd_migrate.add_argument(
    "--no-extension",
    dest="include_extension",
    action="store_false",
    default=None,
    help="Drop file extensions from generated specifiers",
  )
  cmd_migrate.add_argument("--jobs", type=int, default=None, help="Worker threads for rewriting files")
  cmd_migrate.add_argument(
    "--dry-run", action="store_true", default=None, help="Report what would change without writing files"
  )

  # --- Command: SCAN ---
  cmd_scan = subparsers.add_parser("scan", help="Print the symbol catalog of one or more packages")
  cmd_scan.add_argument("source", help="Package directory or glob of package directories")
  cmd_scan.add_argument(
    "--ignore-source-files", default=None, help="Comma-separated globs of package modules to mark as ignored"
  )

  args = parser.parse_args(argv)
  set_verbose(args.verbose)

  if args.command == "migrate":
    return commands.handle_migrate(
      source=args.source,
      target=args.target,
      ignore_source_files=parse_cli_patterns(args.ignore_source_files),
      ignore_target_files=parse_cli_patterns(args.ignore_target_files),
      include_extension=args.include_extension,
      jobs=args.jobs,
      dry_run=args.dry_run,
    )

  elif args.command == "scan":
    return commands.handle_scan(args.source, parse_cli_patterns(args.ignore_source_files))

  return 0


if __name__ == "__main__":
  sys.exit(main())
