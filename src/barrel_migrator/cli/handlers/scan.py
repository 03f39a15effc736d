"""
Scan Command Handler.

Prints the symbol catalog of the selected packages without touching any file:
every exported name with the module it would be imported from.
"""

from typing import List, Optional

from rich.table import Table

from barrel_migrator.config import RuntimeConfig
from barrel_migrator.core.engine import MigrationEngine, PackageCatalog
from barrel_migrator.enums import ResolutionStatus
from barrel_migrator.source.package_meta import PackageMetadataError, resolve_package_roots
from barrel_migrator.utils.console import console, log_error, log_info, log_warning


def handle_scan(source: str, ignore_source_files: Optional[List[str]] = None) -> int:
  """
  Handles the 'scan' command execution.

  Args:
      source: Package directory or glob of package directories.
      ignore_source_files: Globs of package modules to mark as ignored.

  Returns:
      int: Exit code (0 if at least one package was scanned).
  """
  config = RuntimeConfig.load(source_pattern=source, ignore_source_files=ignore_source_files)
  roots = resolve_package_roots(config.source_pattern)
  if not roots:
    log_error(f"No package directory matches '{source}'")
    return 1

  engine = MigrationEngine(config)
  scanned = 0
  for root in roots:
    try:
      package = engine.load_package(root)
    except PackageMetadataError as e:
      log_warning(f"Skipping [path]{root}[/path]: {e}")
      continue
    _print_catalog(package)
    scanned += 1

  return 0 if scanned else 1


def _print_catalog(package: PackageCatalog) -> None:
  catalog = package.catalog
  table = Table(title=f"{catalog.package_name} ({package.root})")
  table.add_column("Symbol", style="magenta")
  table.add_column("Imported From", style="cyan")
  table.add_column("Status")

  for name in sorted(set(catalog.candidates) | set(catalog.externals)):
    resolution = catalog.resolve(name)
    if resolution.status == ResolutionStatus.EXTERNAL and resolution.external:
      table.add_row(name, resolution.external.specifier, "external")
    elif resolution.entry:
      table.add_row(name, resolution.entry.module.path, resolution.status.value)

  console.print(table)
  failures = len(catalog.parse_failures) + len(package.unreadable)
  log_info(f"{catalog.symbol_count} symbol(s), {len(package.files)} module(s), {failures} parse error(s)")
