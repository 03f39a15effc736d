"""
Import Site Locator.

Finds the consumer modules of a package: every module with at least one import
declaration whose specifier is the package name or a subpath of it
(``pkg/...``). Matching is purely syntactic on the specifier string.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from barrel_migrator.core.declarations import ImportDeclaration, scan_module
from barrel_migrator.source.parser import ParseError

logger = logging.getLogger(__name__)


def matches_package(specifier: str, package_name: str) -> bool:
  """
  Checks whether an import specifier refers to a package.

  Args:
      specifier: Specifier of an import declaration.
      package_name: The package name.

  Returns:
      bool: True for ``pkg`` and ``pkg/<subpath>``.
  """
  return specifier == package_name or specifier.startswith(f"{package_name}/")


@dataclass(frozen=True)
class ImportSite:
  """
  A consumer module and its import declarations that target the package.

  Attributes:
      path: Location of the module (as given to the locator).
      text: The module text the declarations were read from.
      declarations: Qualifying import declarations, in source order.
  """

  path: str
  text: str
  declarations: Tuple[ImportDeclaration, ...]


@dataclass
class LocatorResult:
  """Sites found plus the modules that could not be parsed."""

  sites: List[ImportSite]
  parse_failures: List[str]


def find_import_site(path: str, text: str, package_name: str) -> ImportSite:
  """
  Reads the qualifying declarations of one module.

  Args:
      path: Module path.
      text: Module text.
      package_name: The package name.

  Returns:
      ImportSite: Possibly with no declarations.

  Raises:
      barrel_migrator.source.parser.ParseError: If the module cannot be parsed.
  """
  # Cheap pre-filter: no occurrence of the name means no qualifying specifier.
  if package_name not in text:
    return ImportSite(path=path, text=text, declarations=())

  scan = scan_module(text, path)
  decls = tuple(d for d in scan.imports if matches_package(d.specifier, package_name))
  return ImportSite(path=path, text=text, declarations=decls)


def locate_import_sites(modules: Iterable[Tuple[str, str]], package_name: str) -> LocatorResult:
  """
  Scans consumer modules for imports of a package.

  Each module is returned at most once, carrying all of its qualifying
  declarations. Unparseable modules are skipped and reported.

  Args:
      modules: ``(path, text)`` pairs of the target tree.
      package_name: The package name.

  Returns:
      LocatorResult: Sites in input order and parse failures.
  """
  sites: List[ImportSite] = []
  failures: List[str] = []

  for path, text in modules:
    try:
      site = find_import_site(path, text, package_name)
    except ParseError as e:
      logger.warning("Skipping unparseable file %s: %s", path, e)
      failures.append(path)
      continue
    if site.declarations:
      sites.append(site)

  return LocatorResult(sites=sites, parse_failures=failures)
