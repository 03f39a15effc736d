"""
Integration tests for the Migration Engine.

Each test builds a small monorepo on disk, runs the engine against it and
checks the rewritten files and the report counters.
"""

import pytest

from barrel_migrator.config import RuntimeConfig
from barrel_migrator.core.engine import MigrationEngine, MigrationError


def _run(source, target, **options):
  config = RuntimeConfig(source_pattern=str(source), target_path=target, **options)
  return MigrationEngine(config).run()


def _read(path):
  return path.read_text(encoding="utf-8")


def test_ts_monorepo(monorepo):
  report = _run(monorepo / "packages" / "source-lib", monorepo)

  content = _read(monorepo / "packages/target-app/src/calculator.ts")
  assert 'import { add } from "@test/source-lib/src/utils.ts"' in content
  assert 'import { PI } from "@test/source-lib/src/constants.ts"' in content
  assert 'import { add, PI } from "@test/source-lib"' not in content
  assert "return PI * add(radius, radius);" in content

  assert report.packages_found == 1
  assert report.files_modified == 1
  assert report.imports_rewritten == 2
  (pkg,) = report.packages
  assert pkg.name == "@test/source-lib"
  assert pkg.source_files_scanned == 3
  assert pkg.source_files_with_exports == 2
  assert pkg.symbols_found == 4
  assert pkg.modified_files == ["packages/target-app/src/calculator.ts"]
  assert report.warnings == []


def test_js_monorepo(tmp_path, package_factory):
  package_factory(
    tmp_path / "packages/source-lib",
    "@test/source-lib",
    {
      "src/utils.js": "export const multiply = (a, b) => a * b;\nexport const divide = (a, b) => a / b;\n",
      "src/config.js": "export const API_URL = 'https://api.example.com';\nexport const MAX_RETRIES = 3;\n",
      "src/index.js": 'export * from "./utils.js";\nexport * from "./config.js";\n',
    },
    main="src/index.js",
    type="module",
  )
  package_factory(
    tmp_path / "packages/target-app",
    "@test/target-app",
    {
      "src/api-client.js": (
        'import { multiply, API_URL } from "@test/source-lib";\n'
        "\n"
        "export const fetchWithRetry = async (endpoint) => {\n"
        "  const fullUrl = `${API_URL}${endpoint}`;\n"
        "  return fetch(fullUrl, { timeout: multiply(1000, 2) });\n"
        "};\n"
      )
    },
  )

  _run(tmp_path / "packages/source-lib", tmp_path)

  content = _read(tmp_path / "packages/target-app/src/api-client.js")
  assert 'import { multiply } from "@test/source-lib/src/utils.js"' in content
  assert 'import { API_URL } from "@test/source-lib/src/config.js"' in content


def test_glob_selects_multiple_packages(tmp_path, package_factory, files_factory):
  package_factory(
    tmp_path / "packages/ui-lib",
    "@test/ui-lib",
    {
      "src/Button.ts": "export const Button = () => 'button';\n",
      "src/Input.ts": "export const Input = () => 'input';\n",
      "src/index.ts": 'export * from "./Button";\nexport * from "./Input";\n',
    },
  )
  package_factory(
    tmp_path / "packages/utils-lib",
    "@test/utils-lib",
    {
      "src/format.ts": "export const formatDate = (d: Date) => d.toISOString();\n",
      "src/validate.ts": "export const isValidEmail = (s: string) => s.includes('@');\n",
      "src/index.ts": 'export * from "./format";\nexport * from "./validate";\n',
    },
  )
  files_factory(
    tmp_path / "apps/web",
    {
      "src/form.ts": (
        'import { Button, Input } from "@test/ui-lib";\n'
        'import { formatDate, isValidEmail } from "@test/utils-lib";\n'
        "\n"
        "export const render = () => [Button(), Input(), formatDate(new Date()), isValidEmail('a@b')];\n"
      )
    },
  )

  report = _run(tmp_path / "packages" / "*", tmp_path / "apps")

  content = _read(tmp_path / "apps/web/src/form.ts")
  assert 'import { Button } from "@test/ui-lib/src/Button.ts"' in content
  assert 'import { Input } from "@test/ui-lib/src/Input.ts"' in content
  assert 'import { formatDate } from "@test/utils-lib/src/format.ts"' in content
  assert 'import { isValidEmail } from "@test/utils-lib/src/validate.ts"' in content
  assert report.packages_found == 2
  assert report.packages_processed == 2
  assert report.imports_rewritten == 4


@pytest.mark.parametrize(
  "module, names",
  [
    (
      "export enum Status { Active = 'active', Inactive = 'inactive' }\n"
      "export enum Direction { Up, Down }\n",
      "Status, Direction",
    ),
    (
      "export interface User { id: string; name: string }\nexport interface Config { debug: boolean }\n",
      "User, Config",
    ),
    (
      "export type Status = 'on' | 'off';\n"
      "export type Coordinates = { x: number; y: number };\n"
      "export type Callback = (error: Error | null) => void;\n",
      "Status, Coordinates, Callback",
    ),
    (
      "export class Logger { log(msg: string) { console.log(msg); } }\n"
      "export class Timer { start() { return Date.now(); } }\n",
      "Logger, Timer",
    ),
  ],
  ids=["enums", "interfaces", "type-aliases", "classes"],
)
def test_typescript_declaration_kinds(tmp_path, package_factory, files_factory, module, names):
  package_factory(
    tmp_path / "packages/source-lib",
    "@test/source-lib",
    {"src/types.ts": module, "src/index.ts": 'export * from "./types";\n'},
  )
  files_factory(tmp_path / "app", {"main.ts": f'import {{ {names} }} from "@test/source-lib";\n\nconsole.log(1);\n'})

  _run(tmp_path / "packages/source-lib", tmp_path / "app")

  content = _read(tmp_path / "app/main.ts")
  assert f'import {{ {names} }} from "@test/source-lib/src/types.ts"' in content
  assert f'import {{ {names} }} from "@test/source-lib"' not in content


def test_auxiliary_declarations_lose_to_real_ones(tmp_path, package_factory, files_factory):
  package_factory(
    tmp_path / "ui",
    "@acme/ui",
    {
      "src/button.tsx": "export const Button = () => null;\n",
      "src/button.stories.tsx": "export const Button = () => null;\n",
      "src/index.ts": 'export * from "./button";\n',
    },
  )
  files_factory(tmp_path / "app", {"page.tsx": 'import { Button } from "@acme/ui";\n'})

  _run(tmp_path / "ui", tmp_path / "app")

  assert _read(tmp_path / "app/page.tsx") == 'import { Button } from "@acme/ui/src/button.tsx";\n'


def test_default_alias_loses_to_named_declaration(tmp_path, package_factory, files_factory):
  package_factory(
    tmp_path / "ui",
    "@acme/ui",
    {
      "src/a.ts": "export default function helper() {}\n",
      "src/b.ts": "export const helper = 1;\n",
      "index.ts": 'export * from "./src/b";\nexport { default as a } from "./src/a";\n',
    },
  )
  files_factory(tmp_path / "app", {"page.ts": 'import { helper } from "@acme/ui";\n'})

  _run(tmp_path / "ui", tmp_path / "app")

  assert _read(tmp_path / "app/page.ts") == 'import { helper } from "@acme/ui/src/b.ts";\n'


def test_external_reexport(tmp_path, package_factory, files_factory):
  package_factory(
    tmp_path / "ui",
    "@acme/ui",
    {"src/index.ts": 'export { clsx } from "clsx";\nexport * from "./button";\n', "src/button.ts": "export const B = 1;\n"},
  )
  files_factory(tmp_path / "app", {"page.ts": 'import { clsx, B } from "@acme/ui";\n'})

  _run(tmp_path / "ui", tmp_path / "app")

  assert _read(tmp_path / "app/page.ts") == ('import { clsx } from "clsx";\nimport { B } from "@acme/ui/src/button.ts";\n')


def test_unresolved_symbols_are_warned_and_kept(monorepo, files_factory):
  files_factory(monorepo / "packages/target-app", {"src/extra.ts": 'import { add, Nope } from "@test/source-lib";\n'})

  report = _run(monorepo / "packages/source-lib", monorepo)

  content = _read(monorepo / "packages/target-app/src/extra.ts")
  assert content == ('import { Nope } from "@test/source-lib";\nimport { add } from "@test/source-lib/src/utils.ts";\n')
  assert report.warnings == ["packages/target-app/src/extra.ts: could not resolve 'Nope' from @test/source-lib"]


def test_second_run_changes_nothing(monorepo):
  _run(monorepo / "packages/source-lib", monorepo)
  before = _read(monorepo / "packages/target-app/src/calculator.ts")

  report = _run(monorepo / "packages/source-lib", monorepo)

  assert _read(monorepo / "packages/target-app/src/calculator.ts") == before
  assert report.files_modified == 0
  assert report.imports_rewritten == 0


def test_without_extension(monorepo):
  _run(monorepo / "packages/source-lib", monorepo, include_extension=False)

  content = _read(monorepo / "packages/target-app/src/calculator.ts")
  assert 'import { add } from "@test/source-lib/src/utils"' in content
  assert 'import { PI } from "@test/source-lib/src/constants"' in content


def test_ignored_source_files_keep_root_import(monorepo):
  report = _run(monorepo / "packages/source-lib", monorepo, ignore_source_files=["**/constants.ts"])

  content = _read(monorepo / "packages/target-app/src/calculator.ts")
  assert 'import { PI } from "@test/source-lib";' in content
  assert 'import { add } from "@test/source-lib/src/utils.ts"' in content
  assert report.packages[0].source_files_ignored == 1
  assert report.warnings == []


def test_ignored_target_files_are_untouched(monorepo):
  original = _read(monorepo / "packages/target-app/src/calculator.ts")

  report = _run(monorepo / "packages/source-lib", monorepo, ignore_target_files=["**/calculator.ts"])

  assert _read(monorepo / "packages/target-app/src/calculator.ts") == original
  (pkg,) = report.packages
  assert pkg.target_files_found == 1
  assert pkg.target_files_skipped == 1
  assert pkg.target_files_modified == 0


def test_dry_run_writes_nothing(monorepo):
  original = _read(monorepo / "packages/target-app/src/calculator.ts")

  report = _run(monorepo / "packages/source-lib", monorepo, dry_run=True)

  assert _read(monorepo / "packages/target-app/src/calculator.ts") == original
  assert report.dry_run
  assert report.files_modified == 1
  assert report.packages[0].modified_files == ["packages/target-app/src/calculator.ts"]


def test_jobs_produce_identical_output(monorepo, files_factory):
  files_factory(
    monorepo / "packages/target-app",
    {f"src/m{i}.ts": 'import { E, subtract } from "@test/source-lib";\n' for i in range(6)},
  )

  report = _run(monorepo / "packages/source-lib", monorepo, jobs=4)

  assert report.files_modified == 7
  for i in range(6):
    assert _read(monorepo / f"packages/target-app/src/m{i}.ts") == (
      'import { E } from "@test/source-lib/src/constants.ts";\nimport { subtract } from "@test/source-lib/src/utils.ts";\n'
    )
  assert report.packages[0].modified_files == sorted(report.packages[0].modified_files)


def test_package_without_manifest_is_skipped(monorepo, files_factory):
  files_factory(monorepo / "packages/no-manifest", {"src/index.ts": "export const X = 1;\n"})

  report = _run(monorepo / "packages" / "*", monorepo)

  assert report.packages_found == 3
  assert report.packages_skipped == 1
  assert report.packages_processed == 2
  skipped = next(p for p in report.packages if p.skipped)
  assert skipped.root.endswith("no-manifest")
  assert report.files_modified == 1


def test_unparseable_files_are_counted(monorepo, files_factory):
  files_factory(monorepo / "packages/source-lib", {"src/broken.ts": "export const = ;\n"})
  files_factory(monorepo / "packages/target-app", {"src/broken.ts": 'import { add } from "@test/source-lib";\nlet = ;\n'})

  report = _run(monorepo / "packages/source-lib", monorepo)

  (pkg,) = report.packages
  assert pkg.source_parse_errors == 1
  assert pkg.target_parse_errors == 1
  assert report.files_modified == 1


def test_write_failures_are_recorded(monorepo, monkeypatch):
  def failing_write(path, text):
    raise PermissionError(f"read-only: {path}")

  monkeypatch.setattr("barrel_migrator.core.engine.write_text", failing_write)

  report = _run(monorepo / "packages/source-lib", monorepo)

  assert report.has_errors
  assert report.files_modified == 0
  assert "packages/target-app/src/calculator.ts" in report.errors[0]


def test_missing_packages_abort(tmp_path):
  with pytest.raises(MigrationError):
    _run(tmp_path / "nothing-here", tmp_path)


def test_missing_target_aborts(monorepo):
  with pytest.raises(MigrationError):
    _run(monorepo / "packages/source-lib", monorepo / "missing")


def test_node_modules_are_never_rewritten(monorepo, files_factory):
  files_factory(monorepo, {"node_modules/dep/index.ts": 'import { add } from "@test/source-lib";\n'})

  _run(monorepo / "packages/source-lib", monorepo)

  assert _read(monorepo / "node_modules/dep/index.ts") == 'import { add } from "@test/source-lib";\n'
