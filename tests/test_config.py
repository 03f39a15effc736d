"""
Tests for RuntimeConfig loading and validation.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from barrel_migrator.config import DEFAULT_INCLUDE_PATTERNS, RuntimeConfig, parse_cli_patterns


def test_defaults():
  config = RuntimeConfig(source_pattern="packages/*")
  assert config.target_path == Path(".")
  assert config.include_extension
  assert config.jobs == 1
  assert not config.dry_run
  assert config.include_patterns == DEFAULT_INCLUDE_PATTERNS
  assert "**/node_modules/**" in config.exclude_patterns
  assert "**/*.stories.*" in config.auxiliary_patterns


def test_blank_source_is_rejected():
  with pytest.raises(ValidationError):
    RuntimeConfig(source_pattern="  ")


def test_jobs_must_be_positive():
  with pytest.raises(ValidationError):
    RuntimeConfig(source_pattern="p", jobs=0)


def test_patterns_are_cleaned():
  config = RuntimeConfig(source_pattern="p", ignore_target_files=[" **/*.spec.ts ", "", "  "])
  assert config.ignore_target_files == ["**/*.spec.ts"]


def test_load_without_toml(tmp_path):
  config = RuntimeConfig.load("p", search_path=tmp_path)
  assert config.ignore_source_files == []
  assert config.target_path == Path(".")


def test_load_merges_toml_under_cli(tmp_path):
  (tmp_path / "pyproject.toml").write_text(
    "[tool.barrel_migrator]\n"
    'target_path = "apps"\n'
    'ignore_source_files = ["**/*.test.ts"]\n'
    'ignore_target_files = ["**/legacy/**"]\n'
    "include_extension = false\n"
    "jobs = 3\n"
    'exclude_patterns = ["**/out/**"]\n',
    encoding="utf-8",
  )
  nested = tmp_path / "packages" / "ui"
  nested.mkdir(parents=True)

  config = RuntimeConfig.load("packages/*", ignore_target_files=["**/*.spec.ts"], search_path=nested)

  assert config.target_path == tmp_path / "apps"
  assert config.ignore_source_files == ["**/*.test.ts"]
  assert config.ignore_target_files == ["**/*.spec.ts"]
  assert config.include_extension is False
  assert config.jobs == 3
  assert config.exclude_patterns == ["**/out/**"]


def test_explicit_target_wins_over_toml(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.barrel_migrator]\ntarget_path = "apps"\n', encoding="utf-8")
  config = RuntimeConfig.load("p", target_path=Path("elsewhere"), search_path=tmp_path)
  assert config.target_path == Path("elsewhere")


def test_pyproject_without_section_is_skipped(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.barrel_migrator]\njobs = 2\n', encoding="utf-8")
  inner = tmp_path / "inner"
  inner.mkdir()
  (inner / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")

  assert RuntimeConfig.load("p", search_path=inner).jobs == 2


@pytest.mark.parametrize(
  "value, expected",
  [(None, None), ("", []), ("**/*.test.ts,**/node_modules/**", ["**/*.test.ts", "**/node_modules/**"]), ("a, b,", ["a", "b"])],
)
def test_parse_cli_patterns(value, expected):
  assert parse_cli_patterns(value) == expected
