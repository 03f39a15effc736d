"""
barrel-migrator Package.

Rewrites imports of JavaScript/TypeScript packages that go through a barrel
(``import { Button } from "@acme/ui"``) into direct imports of the modules that
declare each symbol (``import { Button } from "@acme/ui/src/button.tsx"``).

Usage
-----

.. code-block:: python

    import barrel_migrator as bm

    report = bm.migrate("packages/*", "apps/web", ignore_target_files=["**/*.test.ts"])
    print(report.files_modified, report.imports_rewritten)
    for warning in report.warnings:
        print(warning)

Advanced Usage
^^^^^^^^^^^^^^

.. code-block:: python

    from barrel_migrator import MigrationEngine, RuntimeConfig

    config = RuntimeConfig(source_pattern="packages/ui", target_path="apps", dry_run=True)
    report = MigrationEngine(config).run()
"""

from pathlib import Path
from typing import Any, Union

from barrel_migrator.config import RuntimeConfig
from barrel_migrator.core.engine import MigrationEngine, MigrationError
from barrel_migrator.core.report import MigrationReport

__version__ = "0.0.1"


def migrate(source: str, target: Union[str, Path] = ".", **options: Any) -> MigrationReport:
  """
  Migrates the consumers of one or more packages.

  Args:
      source (str): Package root, or glob of package roots (``packages/*``).
      target (Union[str, Path]): Root of the tree whose imports are rewritten.
      **options: Any other :class:`RuntimeConfig` field, e.g.
          ``ignore_source_files``, ``ignore_target_files``,
          ``include_extension``, ``jobs`` or ``dry_run``.

  Returns:
      MigrationReport: Counters, warnings and errors of the run.

  Raises:
      MigrationError: If no package matches ``source`` or ``target`` is missing.
  """
  config = RuntimeConfig(source_pattern=source, target_path=Path(target), **options)
  return MigrationEngine(config).run()


__all__ = [
  "migrate",
  "MigrationEngine",
  "MigrationError",
  "MigrationReport",
  "RuntimeConfig",
  "__version__",
]
