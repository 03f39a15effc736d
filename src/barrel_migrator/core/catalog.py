"""
Symbol Catalog Builder.

Builds, for one package, the mapping from every exported name to the module
that actually declares it. Every module of the package is scanned on its own
(flat scan); barrels are never traversed, so nesting depth and re-export cycles
are irrelevant for internal names. Re-exports of third-party specifiers are a
single hop to a non-relative specifier and are recorded as external bindings.

When several modules declare the same name, candidates are ordered by a pure
sort key:

1.  Non-auxiliary modules (tests, stories, specs, mocks, fixtures) first.
2.  Named declarations before a module whose default export only carries the
    name as its identifier.
3.  Aggregation roots (``index.*`` or a ``package.json`` entry point) first.
4.  Lexicographic module path.

A name with an external binding resolves to it even when internal candidates
exist; the name is not locally ownable.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from barrel_migrator.core.declarations import ExportDeclaration, ModuleScan, scan_module
from barrel_migrator.enums import ExportKind, ResolutionStatus
from barrel_migrator.source.files import matches_any
from barrel_migrator.source.parser import ParseError

logger = logging.getLogger(__name__)

DEFAULT_AUXILIARY_PATTERNS: Tuple[str, ...] = (
  "**/__tests__/**",
  "**/__mocks__/**",
  "**/__fixtures__/**",
  "**/__stories__/**",
  "**/test/**",
  "**/tests/**",
  "**/spec/**",
  "**/specs/**",
  "**/stories/**",
  "**/mocks/**",
  "**/fixtures/**",
  "**/*.test.*",
  "**/*.spec.*",
  "**/*.stories.*",
  "**/*.story.*",
  "**/*.mock.*",
  "**/*.fixture.*",
)


def _strip_extension(path: str) -> str:
  pure = PurePosixPath(path)
  return str(pure.with_suffix("")) if pure.suffix else path


@dataclass(frozen=True)
class SourceModule:
  """
  A module of the package being cataloged.

  Attributes:
      path: POSIX path relative to the package root.
      ignored: Matched a source ignore pattern (still scanned and cataloged).
      is_barrel: Contains at least one re-export from another module.
      is_auxiliary: Lives in a test/story/spec location.
      is_aggregation_root: Is an ``index`` module or a manifest entry point.
  """

  path: str
  ignored: bool = False
  is_barrel: bool = False
  is_auxiliary: bool = False
  is_aggregation_root: bool = False


@dataclass(frozen=True)
class CatalogEntry:
  """A module directly declaring a name, with the declaring record."""

  module: SourceModule
  declaration: ExportDeclaration

  @property
  def is_default(self) -> bool:
    """True if the name is the module's default export under an alias."""
    return self.declaration.kind == ExportKind.DEFAULT

  @property
  def sort_key(self) -> Tuple[bool, bool, bool, str]:
    """Disambiguation key; smaller is preferred."""
    module = self.module
    return (module.is_auxiliary, self.is_default, not module.is_aggregation_root, module.path)


@dataclass(frozen=True)
class ExternalBinding:
  """
  A name re-exported from a third-party specifier.

  Attributes:
      specifier: The external specifier (e.g. 'react').
      imported_name: Name exported by the external module.
      origin: Path of the package module holding the re-export.
      type_only: Re-exported with ``export type``.
  """

  specifier: str
  imported_name: str
  origin: str
  type_only: bool = False


@dataclass(frozen=True)
class Resolution:
  """
  Answer of :meth:`SymbolCatalog.resolve`.
  """

  name: str
  status: ResolutionStatus
  entry: Optional[CatalogEntry] = None
  external: Optional[ExternalBinding] = None


@dataclass(frozen=True)
class SymbolCatalog:
  """
  Name-to-declaring-module mapping of one package.

  Attributes:
      package_name: Specifier consumers import the package by.
      modules: All scanned modules by path.
      candidates: Declaring modules per name, best candidate first.
      externals: External bindings per name.
      parse_failures: Paths of modules that could not be parsed.
      export_count: Number of direct export records found.
  """

  package_name: str
  modules: Mapping[str, SourceModule] = field(default_factory=dict)
  candidates: Mapping[str, Tuple[CatalogEntry, ...]] = field(default_factory=dict)
  externals: Mapping[str, ExternalBinding] = field(default_factory=dict)
  parse_failures: Tuple[str, ...] = ()
  export_count: int = 0

  def resolve(self, name: str) -> Resolution:
    """
    Resolves an exported name.

    Args:
        name: The name a consumer imports from the package.

    Returns:
        Resolution: External binding, declaring entry, or unresolved.
    """
    external = self.externals.get(name)
    if external is not None:
      return Resolution(name=name, status=ResolutionStatus.EXTERNAL, external=external)

    entries = self.candidates.get(name)
    if not entries:
      return Resolution(name=name, status=ResolutionStatus.UNRESOLVED)

    best = entries[0]
    status = ResolutionStatus.IGNORED if best.module.ignored else ResolutionStatus.INTERNAL
    return Resolution(name=name, status=status, entry=best)

  @property
  def symbol_count(self) -> int:
    """Number of distinct names the catalog can resolve."""
    return len(set(self.candidates) | set(self.externals))

  @property
  def modules_with_exports(self) -> int:
    """Number of modules declaring at least one name."""
    paths = {e.module.path for entries in self.candidates.values() for e in entries}
    return len(paths)

  @property
  def ignored_modules(self) -> int:
    """Number of modules matching an ignore pattern."""
    return sum(1 for m in self.modules.values() if m.ignored)


class CatalogBuilder:
  """
  Scans the modules of a package and merges their declarations.
  """

  def __init__(
    self,
    package_name: str,
    ignore_patterns: Sequence[str] = (),
    auxiliary_patterns: Sequence[str] = DEFAULT_AUXILIARY_PATTERNS,
    entry_points: Sequence[str] = (),
  ):
    """
    Initializes the builder.

    Args:
        package_name: The package specifier.
        ignore_patterns: Globs of modules whose names must not be rewritten.
        auxiliary_patterns: Globs classifying auxiliary modules.
        entry_points: Manifest entry files (relative paths) of the package.
    """
    self.package_name = package_name
    self.ignore_patterns = tuple(ignore_patterns)
    self.auxiliary_patterns = tuple(auxiliary_patterns)
    self._entry_stems = {_strip_extension(p) for p in entry_points}

  def classify(self, path: str, scan: Optional[ModuleScan] = None) -> SourceModule:
    """
    Builds the :class:`SourceModule` record of a path.

    Args:
        path: POSIX path relative to the package root.
        scan: The module's scan result, if it could be parsed.

    Returns:
        SourceModule: The classified module.
    """
    stem = PurePosixPath(path).name.split(".")[0]
    return SourceModule(
      path=path,
      ignored=matches_any(path, self.ignore_patterns),
      is_barrel=bool(scan and scan.is_barrel),
      is_auxiliary=matches_any(path, self.auxiliary_patterns),
      is_aggregation_root=stem == "index" or _strip_extension(path) in self._entry_stems,
    )

  def build(self, sources: Iterable[Tuple[str, str]]) -> SymbolCatalog:
    """
    Scans every module and merges the results.

    Args:
        sources: ``(relative path, text)`` pairs; order does not matter.

    Returns:
        SymbolCatalog: The package catalog.
    """
    modules: Dict[str, SourceModule] = {}
    candidates: Dict[str, List[CatalogEntry]] = {}
    externals: Dict[str, ExternalBinding] = {}
    failures: List[str] = []
    export_count = 0

    for path, text in sorted(sources, key=lambda item: item[0]):
      try:
        scan = scan_module(text, path)
      except ParseError as e:
        logger.warning("Skipping unparseable module %s: %s", path, e)
        failures.append(path)
        modules[path] = self.classify(path)
        continue

      module = self.classify(path, scan)
      modules[path] = module
      if module.ignored:
        logger.debug("Module %s matches an ignore pattern; its names stay on the package root", path)

      for decl in scan.exports:
        if decl.name == "default":
          continue
        if decl.is_external:
          if decl.source_name == "*":
            continue
          if decl.name not in externals:
            externals[decl.name] = ExternalBinding(
              specifier=decl.reexport_specifier or "",
              imported_name=decl.source_name,
              origin=path,
              type_only=decl.type_only,
            )
          elif externals[decl.name].specifier != decl.reexport_specifier:
            logger.debug(
              "'%s' is re-exported from %s and %s; keeping the first",
              decl.name,
              externals[decl.name].specifier,
              decl.reexport_specifier,
            )
        elif not decl.is_reexport:
          export_count += 1
          candidates.setdefault(decl.name, []).append(CatalogEntry(module=module, declaration=decl))

    ordered = {name: tuple(sorted(entries, key=lambda e: e.sort_key)) for name, entries in candidates.items()}
    for name in externals:
      if name in ordered:
        logger.debug("'%s' is declared locally and re-exported externally; external wins", name)

    return SymbolCatalog(
      package_name=self.package_name,
      modules=modules,
      candidates=ordered,
      externals=externals,
      parse_failures=tuple(failures),
      export_count=export_count,
    )
