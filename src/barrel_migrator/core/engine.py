"""
Migration Engine.

Drives a run end to end:

1.  Resolve the package selector into package roots.
2.  Enumerate the target tree once.
3.  For each package: read its manifest, build the symbol catalog, locate the
    consumer modules, plan and persist the rewrites.

Failures are contained at the smallest unit. An unparseable module only loses
its own declarations, an unreadable manifest skips its package and a failed
write is recorded against its file. Only an empty package selection or a
missing target root abort the run (:class:`MigrationError`).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from barrel_migrator.config import RuntimeConfig
from barrel_migrator.core.catalog import CatalogBuilder, SymbolCatalog
from barrel_migrator.core.locator import ImportSite, locate_import_sites
from barrel_migrator.core.planner import RewritePlanner, apply_plan
from barrel_migrator.core.report import MigrationReport, PackageReport
from barrel_migrator.source.files import enumerate_files, matches_any, read_text, write_text
from barrel_migrator.source.package_meta import (
  PackageManifest,
  PackageMetadataError,
  read_package_manifest,
  resolve_package_roots,
)
from barrel_migrator.utils.console import log_error, log_info, log_success, log_warning

logger = logging.getLogger(__name__)


class MigrationError(RuntimeError):
  """Raised when a run cannot start at all."""


@dataclass(frozen=True)
class PackageCatalog:
  """
  A package's manifest and catalog.

  Attributes:
      root: Package root directory.
      manifest: The parsed ``package.json``.
      catalog: Symbols of the package.
      files: Module paths scanned (relative to ``root``).
      unreadable: Module paths that could not be read as UTF-8 text.
  """

  root: Path
  manifest: PackageManifest
  catalog: SymbolCatalog
  files: Tuple[str, ...]
  unreadable: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileOutcome:
  """Result of rewriting one consumer module."""

  path: str
  status: str
  rewritten: int = 0
  warnings: Tuple[str, ...] = ()
  error: Optional[str] = None


class MigrationEngine:
  """
  Runs barrel-import migrations described by a :class:`RuntimeConfig`.
  """

  def __init__(self, config: RuntimeConfig):
    """
    Initializes the engine.

    Args:
        config: Resolved run options.
    """
    self.config = config
    self.target_root = Path(config.target_path)

  def run(self) -> MigrationReport:
    """
    Executes the migration.

    Returns:
        MigrationReport: Counters, warnings and errors of the run.

    Raises:
        MigrationError: If no package root matches or the target root is missing.
    """
    roots = resolve_package_roots(self.config.source_pattern)
    if not roots:
      raise MigrationError(f"No package directory matches '{self.config.source_pattern}'")
    if not self.target_root.is_dir():
      raise MigrationError(f"Target directory not found: {self.target_root}")

    target_files = enumerate_files(self.target_root, self.config.include_patterns, self.config.exclude_patterns)
    log_info(f"Found {len(roots)} package(s) and {len(target_files)} module(s) under [path]{self.target_root}[/path]")

    report = MigrationReport(dry_run=self.config.dry_run)
    for root in roots:
      report.packages.append(self.migrate_package(root, target_files))

    verb = "would be modified" if self.config.dry_run else "modified"
    log_success(
      f"{report.packages_processed}/{report.packages_found} package(s) processed, "
      f"{report.files_modified} file(s) {verb}, {report.imports_rewritten} import(s) rewritten"
    )
    return report

  def load_package(self, package_root: Path) -> PackageCatalog:
    """
    Reads the manifest and builds the catalog of one package.

    Args:
        package_root: Directory containing ``package.json``.

    Returns:
        PackageCatalog: The package's catalog.

    Raises:
        PackageMetadataError: If the manifest is missing or unnamed.
    """
    manifest = read_package_manifest(package_root)
    files = enumerate_files(package_root, self.config.include_patterns, self.config.exclude_patterns)

    sources: List[Tuple[str, str]] = []
    unreadable: List[str] = []
    for rel_path in files:
      try:
        sources.append((rel_path, read_text(package_root / rel_path)))
      except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read %s: %s", package_root / rel_path, e)
        unreadable.append(rel_path)

    builder = CatalogBuilder(
      manifest.name,
      ignore_patterns=self.config.ignore_source_files,
      auxiliary_patterns=self.config.auxiliary_patterns,
      entry_points=manifest.entry_points,
    )
    return PackageCatalog(
      root=package_root,
      manifest=manifest,
      catalog=builder.build(sources),
      files=tuple(files),
      unreadable=tuple(unreadable),
    )

  def migrate_package(self, package_root: Path, target_files: List[str]) -> PackageReport:
    """
    Rewrites the consumers of one package.

    Args:
        package_root: Directory of the package.
        target_files: Module paths relative to the target root.

    Returns:
        PackageReport: The package's counters; ``skipped`` if the manifest is unusable.
    """
    report = PackageReport(root=str(package_root))

    try:
      package = self.load_package(package_root)
    except PackageMetadataError as e:
      report.skipped = True
      report.warnings.append(f"Skipping package {package_root}: {e}")
      log_warning(f"Skipping [path]{package_root}[/path]: {e}")
      return report

    catalog = package.catalog
    report.name = package.manifest.name
    report.source_files_scanned = len(package.files)
    report.source_files_with_exports = catalog.modules_with_exports
    report.source_files_ignored = catalog.ignored_modules
    report.source_parse_errors = len(catalog.parse_failures) + len(package.unreadable)
    report.symbols_found = catalog.symbol_count
    log_info(
      f"[symbol]{report.name}[/symbol]: {report.symbols_found} symbol(s) in "
      f"{report.source_files_with_exports} of {report.source_files_scanned} module(s)"
    )

    located = locate_import_sites(self._read_targets(target_files, report), catalog.package_name)
    report.target_parse_errors = len(located.parse_failures)
    report.target_files_found = len(located.sites)

    planner = RewritePlanner(catalog, include_extension=self.config.include_extension)
    if self.config.jobs > 1 and len(located.sites) > 1:
      with ThreadPoolExecutor(max_workers=self.config.jobs) as executor:
        outcomes = list(executor.map(lambda site: self._rewrite_site(site, planner), located.sites))
    else:
      outcomes = [self._rewrite_site(site, planner) for site in located.sites]

    for outcome in outcomes:
      self._record(report, outcome)

    return report

  def _read_targets(self, target_files: List[str], report: PackageReport) -> List[Tuple[str, str]]:
    # Re-read per package: an earlier package may have rewritten the file.
    modules: List[Tuple[str, str]] = []
    for rel_path in target_files:
      try:
        modules.append((rel_path, read_text(self.target_root / rel_path)))
      except (OSError, UnicodeDecodeError) as e:
        report.target_parse_errors += 1
        logger.warning("Cannot read %s: %s", self.target_root / rel_path, e)
    return modules

  def _rewrite_site(self, site: ImportSite, planner: RewritePlanner) -> FileOutcome:
    """
    Plans and (unless dry-running) persists the rewrite of one consumer.

    Args:
        site: The consumer and its qualifying declarations.
        planner: Planner bound to the package catalog.

    Returns:
        FileOutcome: One of ``skipped``, ``unchanged``, ``modified`` or ``error``.
    """
    if matches_any(site.path, self.config.ignore_target_files):
      logger.debug("Skipping ignored target %s", site.path)
      return FileOutcome(path=site.path, status="skipped")

    plan = planner.plan(site)
    if not plan.changed:
      return FileOutcome(path=site.path, status="unchanged", warnings=plan.warnings)

    try:
      new_text = apply_plan(site.text, plan)
      if not self.config.dry_run:
        write_text(self.target_root / site.path, new_text)
    except (OSError, ValueError) as e:
      return FileOutcome(path=site.path, status="error", warnings=plan.warnings, error=f"{site.path}: {e}")

    return FileOutcome(path=site.path, status="modified", rewritten=plan.rewritten, warnings=plan.warnings)

  def _record(self, report: PackageReport, outcome: FileOutcome) -> None:
    for warning in outcome.warnings:
      report.warnings.append(warning)
      log_warning(warning)

    if outcome.status == "skipped":
      report.target_files_skipped += 1
      return

    report.target_files_processed += 1
    if outcome.status == "error":
      report.errors.append(outcome.error or outcome.path)
      log_error(f"Failed to rewrite {outcome.error}")
    elif outcome.status == "modified":
      report.target_files_modified += 1
      report.imports_rewritten += outcome.rewritten
      report.modified_files.append(outcome.path)
      logger.debug("Rewrote %d import(s) in %s", outcome.rewritten, outcome.path)
    else:
      report.target_files_unchanged += 1
