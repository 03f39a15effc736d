"""
Migrate Command Handler.

This module implements the logic for the `barrel-migrator migrate` command.
It orchestrates:
1. Configuration loading (pyproject.toml merged with CLI overrides).
2. Execution of the migration engine.
3. Rendering of the per-package summary table and warnings.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError
from rich.table import Table

from barrel_migrator.config import RuntimeConfig
from barrel_migrator.core.engine import MigrationEngine, MigrationError
from barrel_migrator.core.report import MigrationReport
from barrel_migrator.utils.console import console, log_error, log_success, log_warning


def handle_migrate(
  source: str,
  target: Optional[Path] = None,
  ignore_source_files: Optional[List[str]] = None,
  ignore_target_files: Optional[List[str]] = None,
  include_extension: Optional[bool] = None,
  jobs: Optional[int] = None,
  dry_run: Optional[bool] = None,
) -> int:
  """
  Handles the 'migrate' command execution.

  Args:
      source: Package directory or glob of package directories.
      target: Root of the tree to rewrite.
      ignore_source_files: Globs of package modules whose symbols stay on the root.
      ignore_target_files: Globs of consumer files to leave untouched.
      include_extension: Keep file extensions in generated specifiers.
      jobs: Worker threads for rewriting files.
      dry_run: Report without writing.

  Returns:
      int: Exit code (0 for success, 1 if the run aborted or a file failed).
  """
  try:
    config = RuntimeConfig.load(
      source_pattern=source,
      target_path=target,
      ignore_source_files=ignore_source_files,
      ignore_target_files=ignore_target_files,
      include_extension=include_extension,
      jobs=jobs,
      dry_run=dry_run,
    )
  except ValidationError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  try:
    report = MigrationEngine(config).run()
  except MigrationError as e:
    log_error(str(e))
    return 1

  _print_summary(report)
  return 1 if report.has_errors else 0


def _print_summary(report: MigrationReport) -> None:
  """
  Renders a summary table of the run to the console.

  Args:
      report: The finished run.
  """
  title = "Migration Report (dry run)" if report.dry_run else "Migration Report"
  table = Table(title=title)
  table.add_column("Package", style="cyan")
  table.add_column("Modules", justify="right")
  table.add_column("Symbols", justify="right")
  table.add_column("Consumers", justify="right")
  table.add_column("Modified", justify="right", style="green")
  table.add_column("Skipped", justify="right")
  table.add_column("Rewritten", justify="right", style="green")
  table.add_column("Parse Errors", justify="right", style="red")

  for pkg in report.packages:
    if pkg.skipped:
      table.add_row(pkg.name or pkg.root, "-", "-", "-", "-", "skipped", "-", "-")
      continue
    table.add_row(
      pkg.name,
      str(pkg.source_files_scanned),
      str(pkg.symbols_found),
      str(pkg.target_files_found),
      str(pkg.target_files_modified),
      str(pkg.target_files_skipped),
      str(pkg.imports_rewritten),
      str(pkg.source_parse_errors + pkg.target_parse_errors),
    )

  console.print(table)

  if report.warnings:
    console.print(f"\n[warning]{len(report.warnings)} warning(s)[/warning]")
  if report.has_errors:
    for error in report.errors:
      log_error(error)
    log_warning(f"{len(report.errors)} file(s) could not be rewritten.")
  else:
    log_success(
      f"Summary: {report.packages_processed} package(s) processed, {report.packages_skipped} skipped, "
      f"{report.files_modified} file(s) modified."
    )
