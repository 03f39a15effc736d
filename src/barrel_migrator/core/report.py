"""
Data structures representing the output of a migration run.

This module defines the `PackageReport` and `MigrationReport` Pydantic models,
which carry the counters, warnings and modified file list of a run.
"""

from typing import List

from pydantic import BaseModel, Field


class PackageReport(BaseModel):
  """
  Counters for one source package.
  """

  root: str = Field(..., description="Package root directory.")
  name: str = Field(default="", description="Package name from package.json (empty if unreadable).")
  skipped: bool = Field(default=False, description="True if the package could not be processed.")

  source_files_scanned: int = 0
  source_files_with_exports: int = 0
  source_files_ignored: int = 0
  source_parse_errors: int = 0
  symbols_found: int = 0

  target_files_found: int = 0
  target_files_processed: int = 0
  target_files_modified: int = 0
  target_files_unchanged: int = 0
  target_files_skipped: int = 0
  target_parse_errors: int = 0
  imports_rewritten: int = 0

  errors: List[str] = Field(default_factory=list, description="Failures of individual files.")
  warnings: List[str] = Field(default_factory=list, description="Unresolved symbols and skipped inputs.")
  modified_files: List[str] = Field(default_factory=list, description="Files rewritten (or to be, in dry runs).")


class MigrationReport(BaseModel):
  """
  Aggregate result of a migration run.
  """

  dry_run: bool = False
  packages: List[PackageReport] = Field(default_factory=list)

  @property
  def packages_found(self) -> int:
    """Number of package roots matched by the selector."""
    return len(self.packages)

  @property
  def packages_processed(self) -> int:
    """Packages whose catalog was built."""
    return sum(1 for p in self.packages if not p.skipped)

  @property
  def packages_skipped(self) -> int:
    """Packages skipped (e.g. unreadable package.json)."""
    return sum(1 for p in self.packages if p.skipped)

  @property
  def files_modified(self) -> int:
    """Total files rewritten."""
    return sum(p.target_files_modified for p in self.packages)

  @property
  def imports_rewritten(self) -> int:
    """Total bindings moved to a direct specifier."""
    return sum(p.imports_rewritten for p in self.packages)

  @property
  def warnings(self) -> List[str]:
    """All warnings in package order."""
    return [w for p in self.packages for w in p.warnings]

  @property
  def errors(self) -> List[str]:
    """All file errors in package order."""
    return [e for p in self.packages for e in p.errors]

  @property
  def has_errors(self) -> bool:
    """
    Check if the run recorded any file or package errors.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0
