"""
Tests for the Import Site Locator.
"""

import pytest

from barrel_migrator.core.locator import find_import_site, locate_import_sites, matches_package


@pytest.mark.parametrize(
  "specifier, expected",
  [
    ("@acme/ui", True),
    ("@acme/ui/src/button.tsx", True),
    ("@acme/ui-kit", False),
    ("@acme/u", False),
    ("react", False),
  ],
)
def test_matches_package(specifier, expected):
  assert matches_package(specifier, "@acme/ui") is expected


def test_site_collects_all_qualifying_declarations():
  code = (
    'import React from "react";\n'
    'import { Button } from "@acme/ui";\n'
    'import { Input } from "@acme/ui/src/input.tsx";\n'
    'import { Other } from "@acme/ui-kit";\n'
  )
  site = find_import_site("app.tsx", code, "@acme/ui")
  assert [d.specifier for d in site.declarations] == ["@acme/ui", "@acme/ui/src/input.tsx"]
  assert site.text == code


def test_locate_skips_modules_without_imports():
  modules = [
    ("a.ts", 'import { A } from "pkg";\n'),
    ("b.ts", "const pkg = 1;\n"),
    ("c.ts", "export const C = 1;\n"),
  ]
  result = locate_import_sites(modules, "pkg")
  assert [s.path for s in result.sites] == ["a.ts"]
  assert result.parse_failures == []


def test_locate_reports_unparseable_modules():
  modules = [
    ("broken.ts", 'import { A } from "pkg";\nexport const = ;\n'),
    ("ok.ts", 'import { A } from "pkg";\n'),
  ]
  result = locate_import_sites(modules, "pkg")
  assert [s.path for s in result.sites] == ["ok.ts"]
  assert result.parse_failures == ["broken.ts"]


def test_files_not_mentioning_the_package_are_not_parsed():
  # Invalid syntax is never seen when the package name does not occur.
  result = locate_import_sites([("broken.ts", "export const = ;\n")], "pkg")
  assert result.sites == []
  assert result.parse_failures == []
