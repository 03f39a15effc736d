"""
Package Metadata Reader.

Reads ``package.json`` manifests to learn the specifier consumers use to
import a package, and the entry points that act as the package's aggregation
root. Also resolves the package-selector pattern (a directory or a glob such
as ``packages/*``) into package root directories.
"""

import glob
import json
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

MANIFEST_NAME = "package.json"
_ENTRY_FIELDS = ("main", "module", "types", "typings", "source")
_GLOB_CHARS = set("*?[")


class PackageMetadataError(ValueError):
  """Raised when a package root has no readable, named ``package.json``."""


class PackageManifest(BaseModel):
  """
  The subset of ``package.json`` the migrator relies on.
  """

  model_config = ConfigDict(extra="ignore")

  name: str = Field(..., min_length=1, description="Specifier consumers import the package by.")
  main: Optional[str] = None
  module: Optional[str] = None
  types: Optional[str] = None
  typings: Optional[str] = None
  source: Optional[str] = None
  # String, condition map, subpath map or fallback array; any other shape only
  # loses the entry hints it would have given.
  exports: Any = None

  @field_validator(*_ENTRY_FIELDS, mode="before")
  @classmethod
  def drop_non_string_entries(cls, v: Any) -> Optional[str]:
    """Keeps entry fields that are plain strings; other shapes are ignored."""
    return v if isinstance(v, str) else None

  @property
  def entry_points(self) -> List[str]:
    """
    Entry files declared by the manifest, relative to the package root.

    Returns:
        List[str]: POSIX paths without a leading ``./``, in declaration order.
    """
    raw: List[str] = [getattr(self, f) for f in _ENTRY_FIELDS if getattr(self, f)]
    root_export = self.exports
    if isinstance(root_export, dict):
      root_export = root_export.get(".", root_export)
    raw.extend(_collect_strings(root_export))

    entries: List[str] = []
    for item in raw:
      cleaned = item[2:] if item.startswith("./") else item
      if cleaned and cleaned not in entries:
        entries.append(cleaned)
    return entries


def _collect_strings(value: Any) -> List[str]:
  if isinstance(value, str):
    return [value]
  if isinstance(value, dict):
    out: List[str] = []
    for key, item in value.items():
      # Subpath exports ("./feature") are not the root entry.
      if isinstance(key, str) and key.startswith("./"):
        continue
      out.extend(_collect_strings(item))
    return out
  if isinstance(value, list):
    return [s for item in value for s in _collect_strings(item)]
  return []


def read_package_manifest(package_root: Union[str, Path]) -> PackageManifest:
  """
  Loads and validates ``package.json`` from a package root.

  Args:
      package_root: Directory containing the manifest.

  Returns:
      PackageManifest: The validated manifest.

  Raises:
      PackageMetadataError: If the file is missing, not JSON, or has no name.
  """
  manifest_path = Path(package_root) / MANIFEST_NAME
  try:
    with open(manifest_path, "rt", encoding="utf-8") as f:
      data = json.load(f)
  except (OSError, json.JSONDecodeError) as e:
    raise PackageMetadataError(f"Cannot read {manifest_path}: {e}") from e

  if not isinstance(data, dict):
    raise PackageMetadataError(f"{manifest_path} does not contain a JSON object")

  try:
    return PackageManifest.model_validate(data)
  except ValidationError as e:
    raise PackageMetadataError(f"Invalid {manifest_path}: {e}") from e


def read_package_name(package_root: Union[str, Path]) -> str:
  """
  Returns the import specifier of the package at ``package_root``.

  Args:
      package_root: Directory containing ``package.json``.

  Returns:
      str: The package name.

  Raises:
      PackageMetadataError: See :func:`read_package_manifest`.
  """
  return read_package_manifest(package_root).name


def resolve_package_roots(pattern: Union[str, Path]) -> List[Path]:
  """
  Expands a package selector into package root directories.

  A selector without glob characters names one directory. A glob selector
  (``packages/*``) yields every matching directory, sorted.

  Args:
      pattern: Directory path or glob pattern.

  Returns:
      List[Path]: Existing directories. Empty if nothing matched.
  """
  text = str(pattern)
  if not _GLOB_CHARS.intersection(text):
    path = Path(text).expanduser()
    return [path] if path.is_dir() else []

  matches = sorted(glob.glob(str(Path(text).expanduser())))
  return [Path(m) for m in matches if Path(m).is_dir()]
