"""
Runtime Configuration Store.

Holds the options of a migration run. Values come from explicit arguments (CLI
or Python API) layered over a ``[tool.barrel_migrator]`` table found in the
nearest ``pyproject.toml``.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from barrel_migrator.core.catalog import DEFAULT_AUXILIARY_PATTERNS

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

TOOL_KEY = "barrel_migrator"

DEFAULT_INCLUDE_PATTERNS: List[str] = ["**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx", "**/*.mjs", "**/*.cjs"]
DEFAULT_EXCLUDE_PATTERNS: List[str] = ["**/node_modules/**", "**/dist/**", "**/build/**"]


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the migration engine.
  """

  source_pattern: str = Field(..., description="Package root, or glob of package roots (e.g. 'packages/*').")
  target_path: Path = Field(Path("."), description="Root of the tree whose imports are rewritten.")
  ignore_source_files: List[str] = Field(
    default_factory=list, description="Globs of package modules whose names must stay on the package root."
  )
  ignore_target_files: List[str] = Field(default_factory=list, description="Globs of consumer files left untouched.")
  include_extension: bool = Field(True, description="Keep file extensions in generated specifiers.")
  include_patterns: List[str] = Field(
    default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS), description="Globs of module files to scan."
  )
  exclude_patterns: List[str] = Field(
    default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS), description="Globs never scanned (source or target)."
  )
  auxiliary_patterns: List[str] = Field(
    default_factory=lambda: list(DEFAULT_AUXILIARY_PATTERNS),
    description="Globs of test/story/spec modules, least preferred as declaring modules.",
  )
  jobs: int = Field(1, ge=1, description="Worker threads used for rewriting consumer files.")
  dry_run: bool = Field(False, description="Plan and report without writing files.")

  @field_validator(
    "ignore_source_files",
    "ignore_target_files",
    "include_patterns",
    "exclude_patterns",
    "auxiliary_patterns",
  )
  @classmethod
  def clean_patterns(cls, v: List[str]) -> List[str]:
    """
    Strips whitespace and drops empty patterns.

    Args:
        v (List[str]): Raw patterns.

    Returns:
        List[str]: Cleaned patterns.
    """
    return [p.strip() for p in v if p and p.strip()]

  @field_validator("source_pattern")
  @classmethod
  def validate_source(cls, v: str) -> str:
    """
    Ensures a package selector was given.

    Raises:
        ValueError: If the selector is blank.
    """
    if not v or not v.strip():
      raise ValueError("A source package path or pattern is required.")
    return v.strip()

  @classmethod
  def load(
    cls,
    source_pattern: str,
    target_path: Optional[Path] = None,
    ignore_source_files: Optional[List[str]] = None,
    ignore_target_files: Optional[List[str]] = None,
    include_extension: Optional[bool] = None,
    jobs: Optional[int] = None,
    dry_run: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with explicit arguments.

    Args:
        source_pattern (str): Package root or glob of package roots.
        target_path (Optional[Path]): Override for the target tree root.
        ignore_source_files (Optional[List[str]]): Override for source ignore globs.
        ignore_target_files (Optional[List[str]]): Override for target ignore globs.
        include_extension (Optional[bool]): Override for extension retention.
        jobs (Optional[int]): Override for worker count.
        dry_run (Optional[bool]): Override for dry-run mode.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    final_target = target_path
    if final_target is None and "target_path" in toml_config:
      final_target = Path(toml_config["target_path"])
      if toml_dir and not final_target.is_absolute():
        final_target = toml_dir / final_target

    values: Dict[str, Any] = {
      "source_pattern": source_pattern,
      "target_path": final_target or Path("."),
    }

    overrides = {
      "ignore_source_files": ignore_source_files,
      "ignore_target_files": ignore_target_files,
      "include_extension": include_extension,
      "jobs": jobs,
      "dry_run": dry_run,
    }
    for key, override in overrides.items():
      if override is not None:
        values[key] = override
      elif key in toml_config:
        values[key] = toml_config[key]

    for key in ("include_patterns", "exclude_patterns", "auxiliary_patterns"):
      if key in toml_config:
        values[key] = toml_config[key]

    return cls(**values)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the start directory and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      section = data.get("tool", {}).get(TOOL_KEY)
      if section is not None:
        return section, parent

  return {}, None


def parse_cli_patterns(value: Optional[str]) -> Optional[List[str]]:
  """
  Splits a comma-separated CLI pattern list.

  Args:
      value (Optional[str]): Raw option value, e.g. '**/*.test.ts,**/mocks/**'.

  Returns:
      Optional[List[str]]: Patterns, or None if the option was not given.
  """
  if value is None:
    return None
  return [p.strip() for p in value.split(",") if p.strip()]
