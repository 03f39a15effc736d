"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Builders for throwaway monorepos (package manifests plus module files).
- Console isolation so captured Rich output does not leak between tests.
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# Add src to path so we can import 'barrel_migrator' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from barrel_migrator.utils.console import reset_console  # noqa: E402


def write_files(root: Path, files: Dict[str, str]) -> None:
  """
  Writes a mapping of relative paths to contents below ``root``.

  Args:
      root: Base directory.
      files: ``{"src/index.ts": "export * from './a';"}``.
  """
  for rel_path, content in files.items():
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_package(root: Path, name: str, files: Dict[str, str], **manifest: Any) -> Path:
  """
  Creates a package directory with a ``package.json``.

  Args:
      root: Package directory (created if missing).
      name: Package name.
      files: Module files relative to ``root``.
      **manifest: Extra manifest fields (e.g. ``main="src/index.ts"``).

  Returns:
      Path: The package directory.
  """
  root.mkdir(parents=True, exist_ok=True)
  (root / "package.json").write_text(json.dumps({"name": name, "version": "1.0.0", **manifest}), encoding="utf-8")
  write_files(root, files)
  return root


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
  """
  A monorepo with a source library and a consuming application.

  Layout::

      packages/source-lib   (@test/source-lib, barrel at src/index.ts)
      packages/target-app   (imports from the barrel)
  """
  write_package(
    tmp_path / "packages" / "source-lib",
    "@test/source-lib",
    {
      "src/utils.ts": (
        "export const add = (a: number, b: number): number => a + b;\n"
        "export const subtract = (a: number, b: number): number => a - b;\n"
      ),
      "src/constants.ts": "export const PI = 3.14159;\nexport const E = 2.71828;\n",
      "src/index.ts": 'export * from "./utils";\nexport * from "./constants";\n',
    },
    main="src/index.ts",
    types="src/index.ts",
  )
  write_package(
    tmp_path / "packages" / "target-app",
    "@test/target-app",
    {
      "src/calculator.ts": (
        'import { add, PI } from "@test/source-lib";\n'
        "\n"
        "export const calculateArea = (radius: number): number => {\n"
        "\treturn PI * add(radius, radius);\n"
        "};\n"
      ),
    },
    dependencies={"@test/source-lib": "1.0.0"},
  )
  return tmp_path


@pytest.fixture
def package_factory() -> Callable[..., Path]:
  """Exposes :func:`write_package` to tests."""
  return write_package


@pytest.fixture
def files_factory() -> Callable[[Path, Dict[str, str]], None]:
  """Exposes :func:`write_files` to tests."""
  return write_files


@pytest.fixture(autouse=True)
def isolate_console():
  """Resets the global console after each test."""
  yield
  reset_console()
