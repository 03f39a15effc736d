"""
Declaration Scanner.

Extracts the export and import declarations of a single ECMAScript module from
its tree-sitter syntax tree. The scanner is flat by design: it reports only what
a module itself declares or re-exports and never follows a re-export into
another module. Resolving names across a package is the job of
:mod:`barrel_migrator.core.catalog`, which scans every module of the package
independently.

Recognised forms (top-level statements only)::

    import D, { a, b as c, type T } from "x";     # ImportDeclaration
    import * as ns from "x";                       # ImportDeclaration (namespace)
    export const a = 1, { b, c: [d] } = obj;       # direct: a, b, d
    export function f() {} / class / enum / ...    # direct
    export default function Foo() {}               # default + alias 'Foo'
    export { a, b as c };                          # direct (or re-export if a/b imported)
    export { a as b } from "./x";                  # re-export, imported_name 'a'
    export * as ns from "./x";                     # re-export, imported_name '*'
    export * from "./x";                           # star re-export (no name)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node

from barrel_migrator.enums import ExportKind
from barrel_migrator.source.parser import SourceTree, parse
from barrel_migrator.source.printer import ImportBinding

logger = logging.getLogger(__name__)

_VARIABLE_DECLS = {"lexical_declaration", "variable_declaration"}
_NAME_NODES = {"identifier", "type_identifier", "property_identifier"}
_NAMED_DEFAULT_VALUES = {"function_expression", "function", "class", "generator_function"}


def is_relative_specifier(specifier: str) -> bool:
  """
  Checks whether a module specifier points inside the current package.

  Args:
      specifier: The string literal of an import/export declaration.

  Returns:
      bool: True for ``./x``, ``../x`` and absolute paths.
  """
  return specifier.startswith(".") or specifier.startswith("/")


@dataclass(frozen=True)
class ExportDeclaration:
  """
  One externally visible binding of a module.

  Attributes:
      name: The exported name ('default' for the default export).
      kind: Named export or default export (including a default's alias).
      reexport_specifier: Specifier the binding is re-exported from, if any.
      imported_name: Name of the binding inside the re-exported module
          ('*' for a namespace re-export). Equals ``name`` for direct exports.
      type_only: True for ``export type`` forms.
  """

  name: str
  kind: ExportKind = ExportKind.NAMED
  reexport_specifier: Optional[str] = None
  imported_name: Optional[str] = None
  type_only: bool = False

  @property
  def is_reexport(self) -> bool:
    """True if the binding is declared in another module."""
    return self.reexport_specifier is not None

  @property
  def is_external(self) -> bool:
    """True if the binding is re-exported from a third-party specifier."""
    return self.reexport_specifier is not None and not is_relative_specifier(self.reexport_specifier)

  @property
  def source_name(self) -> str:
    """The name to import from the declaring/re-exported module."""
    return self.imported_name or self.name


@dataclass(frozen=True)
class ImportDeclaration:
  """
  A static import declaration and its location in the module text.

  Attributes:
      specifier: Module specifier string (without quotes).
      bindings: Default and named bindings, in source order.
      namespace: Local name of a ``* as ns`` import, if present.
      type_only: True for ``import type ...``.
      start_byte: Offset of the statement in the UTF-8 encoded text.
      end_byte: End offset (exclusive).
      quote: Quote character used for the specifier.
      semicolon: Whether the statement ends with ``;``.
  """

  specifier: str
  bindings: Tuple[ImportBinding, ...] = ()
  namespace: Optional[str] = None
  type_only: bool = False
  start_byte: int = 0
  end_byte: int = 0
  quote: str = '"'
  semicolon: bool = True

  @property
  def is_side_effect(self) -> bool:
    """True for ``import "x"``."""
    return not self.bindings and self.namespace is None


@dataclass(frozen=True)
class ModuleScan:
  """
  Everything a module declares, as reported by :func:`scan_module`.
  """

  exports: Tuple[ExportDeclaration, ...] = ()
  imports: Tuple[ImportDeclaration, ...] = ()
  star_reexports: Tuple[str, ...] = ()

  @property
  def is_barrel(self) -> bool:
    """True if the module re-exports at least one binding from another module."""
    return bool(self.star_reexports) or any(e.is_reexport for e in self.exports)

  @property
  def direct_exports(self) -> Tuple[ExportDeclaration, ...]:
    """Exports declared by the module itself."""
    return tuple(e for e in self.exports if not e.is_reexport)


def _string_value(text: str) -> str:
  return text[1:-1] if len(text) >= 2 and text[0] in "\"'" else text


def _has_keyword(node: Node, keyword: str) -> bool:
  return any(child.type == keyword for child in node.children)


@dataclass
class DeclarationScanner:
  """
  Walks the top-level statements of one parsed module.
  """

  tree: SourceTree
  _imports: List[ImportDeclaration] = field(default_factory=list)
  _exports: List[ExportDeclaration] = field(default_factory=list)
  _stars: List[str] = field(default_factory=list)

  def scan(self) -> ModuleScan:
    """
    Collects imports first (export clauses consult them), then exports.

    Returns:
        ModuleScan: The module's declarations.
    """
    statements = self.tree.root.children

    for node in statements:
      if node.type == "import_statement":
        decl = self._read_import(node)
        if decl:
          self._imports.append(decl)

    locals_map = self._import_locals()
    for node in statements:
      if node.type == "export_statement":
        self._read_export(node, locals_map)

    return ModuleScan(
      exports=tuple(_collapse(self._exports)),
      imports=tuple(self._imports),
      star_reexports=tuple(self._stars),
    )

  # --- Imports ---

  def _read_import(self, node: Node) -> Optional[ImportDeclaration]:
    source = node.child_by_field_name("source")
    if source is None:
      # `import x = require("y")` and other non-static forms.
      return None

    raw = self.tree.text(source)
    bindings: List[ImportBinding] = []
    namespace = None

    clause = next((c for c in node.children if c.type == "import_clause"), None)
    if clause is not None:
      for child in clause.children:
        if child.type == "identifier":
          bindings.append(ImportBinding(local=self.tree.text(child), imported="default"))
        elif child.type == "namespace_import":
          ident = next((c for c in child.children if c.type == "identifier"), None)
          if ident is not None:
            namespace = self.tree.text(ident)
        elif child.type == "named_imports":
          for spec in child.children:
            if spec.type == "import_specifier":
              bindings.append(self._read_import_specifier(spec))

    return ImportDeclaration(
      specifier=_string_value(raw),
      bindings=tuple(bindings),
      namespace=namespace,
      type_only=_has_keyword(node, "type"),
      start_byte=node.start_byte,
      end_byte=node.end_byte,
      quote=raw[0] if raw[:1] in ("'", '"') else '"',
      semicolon=bool(node.children) and node.children[-1].type == ";",
    )

  def _read_import_specifier(self, spec: Node) -> ImportBinding:
    name_node = spec.child_by_field_name("name")
    alias_node = spec.child_by_field_name("alias")
    imported = _string_value(self.tree.text(name_node)) if name_node is not None else ""
    local = self.tree.text(alias_node) if alias_node is not None else imported
    return ImportBinding(local=local, imported=imported, type_only=_has_keyword(spec, "type"))

  def _import_locals(self) -> Dict[str, Tuple[str, str]]:
    """Maps each imported local name to ``(specifier, imported name)``."""
    mapping: Dict[str, Tuple[str, str]] = {}
    for decl in self._imports:
      for binding in decl.bindings:
        mapping[binding.local] = (decl.specifier, binding.imported)
      if decl.namespace:
        mapping[decl.namespace] = (decl.specifier, "*")
    return mapping

  # --- Exports ---

  def _read_export(self, node: Node, locals_map: Dict[str, Tuple[str, str]]) -> None:
    keywords = [c.type for c in node.children if not c.is_named]
    if "=" in keywords or "namespace" in keywords:
      # `export = x` and `export as namespace X` are not ES module bindings.
      return

    type_only = "type" in keywords
    declaration = node.child_by_field_name("declaration")
    value = node.child_by_field_name("value")

    if "default" in keywords:
      self._exports.append(ExportDeclaration(name="default", kind=ExportKind.DEFAULT))
      alias = self._default_alias(declaration, value)
      if alias:
        self._exports.append(ExportDeclaration(name=alias, kind=ExportKind.DEFAULT, type_only=type_only))
      return

    if declaration is not None:
      type_decl = declaration.type in ("interface_declaration", "type_alias_declaration")
      for name in self._declared_names(declaration):
        self._exports.append(ExportDeclaration(name=name, type_only=type_only or type_decl))
      return

    source = node.child_by_field_name("source")
    specifier = _string_value(self.tree.text(source)) if source is not None else None

    clause = next((c for c in node.children if c.type == "export_clause"), None)
    ns_export = next((c for c in node.children if c.type == "namespace_export"), None)

    if specifier is not None and ns_export is not None:
      name_node = next((c for c in ns_export.children if c.is_named), None)
      if name_node is not None:
        self._exports.append(
          ExportDeclaration(
            name=_string_value(self.tree.text(name_node)),
            reexport_specifier=specifier,
            imported_name="*",
          )
        )
      return

    if specifier is not None and clause is None:
      self._stars.append(specifier)
      return

    if clause is None:
      return

    for spec in clause.children:
      if spec.type != "export_specifier":
        continue
      name_node = spec.child_by_field_name("name")
      alias_node = spec.child_by_field_name("alias")
      if name_node is None:
        continue
      local = _string_value(self.tree.text(name_node))
      exported = _string_value(self.tree.text(alias_node)) if alias_node is not None else local
      spec_type_only = type_only or _has_keyword(spec, "type")

      if specifier is not None:
        self._exports.append(
          ExportDeclaration(
            name=exported,
            reexport_specifier=specifier,
            imported_name=local,
            type_only=spec_type_only,
          )
        )
      elif local in locals_map:
        origin, imported = locals_map[local]
        self._exports.append(
          ExportDeclaration(
            name=exported,
            reexport_specifier=origin,
            imported_name=imported,
            type_only=spec_type_only,
          )
        )
      elif exported == "default":
        self._exports.append(ExportDeclaration(name="default", kind=ExportKind.DEFAULT))
      else:
        self._exports.append(ExportDeclaration(name=exported, type_only=spec_type_only))

  def _default_alias(self, declaration: Optional[Node], value: Optional[Node]) -> Optional[str]:
    if declaration is not None:
      names = self._declared_names(declaration)
      return names[0] if names else None
    if value is None:
      return None
    if value.type == "identifier":
      return self.tree.text(value)
    if value.type in _NAMED_DEFAULT_VALUES:
      name_node = value.child_by_field_name("name")
      if name_node is not None:
        return self.tree.text(name_node)
    return None

  def _declared_names(self, declaration: Node) -> List[str]:
    """Names bound by a declaration following ``export``."""
    if declaration.type in _VARIABLE_DECLS:
      names: List[str] = []
      for child in declaration.named_children:
        if child.type == "variable_declarator":
          target = child.child_by_field_name("name")
          if target is not None:
            names.extend(self._pattern_names(target))
      return names

    if declaration.type == "ambient_declaration":
      # declare const x: T; declare function f(): void; ...
      for child in declaration.named_children:
        names = self._declared_names(child)
        if names:
          return names
      return []

    name_node = declaration.child_by_field_name("name")
    if name_node is None:
      return []
    if name_node.type in _NAME_NODES:
      return [self.tree.text(name_node)]
    if name_node.type == "nested_identifier":
      # namespace A.B {} binds A
      return [self.tree.text(name_node).split(".")[0]]
    return []

  def _pattern_names(self, node: Node) -> List[str]:
    """Identifiers bound by a (possibly destructuring) binding pattern."""
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
      return [self.tree.text(node)]
    if node.type == "pair_pattern":
      value = node.child_by_field_name("value")
      return self._pattern_names(value) if value is not None else []
    if node.type in ("assignment_pattern", "object_assignment_pattern"):
      left = node.child_by_field_name("left")
      return self._pattern_names(left) if left is not None else []
    if node.type in ("object_pattern", "array_pattern", "rest_pattern"):
      names: List[str] = []
      for child in node.named_children:
        names.extend(self._pattern_names(child))
      return names
    return []


def _collapse(exports: List[ExportDeclaration]) -> List[ExportDeclaration]:
  """
  Removes duplicate direct records for one name (e.g. overload signatures).

  A named record replaces a default alias of the same name.
  """
  direct: Dict[str, int] = {}
  out: List[ExportDeclaration] = []
  for decl in exports:
    if decl.is_reexport:
      out.append(decl)
      continue
    if decl.name not in direct:
      direct[decl.name] = len(out)
      out.append(decl)
      continue
    idx = direct[decl.name]
    existing = out[idx]
    if existing.kind == ExportKind.DEFAULT and decl.kind == ExportKind.NAMED and decl.name != "default":
      out[idx] = decl
  return out


def scan_tree(tree: SourceTree) -> ModuleScan:
  """
  Scans an already parsed module.

  Args:
      tree: The parsed module.

  Returns:
      ModuleScan: Its declarations.
  """
  return DeclarationScanner(tree).scan()


def scan_module(text: str, path: str = "module.ts") -> ModuleScan:
  """
  Parses and scans one module.

  Args:
      text: Module source text.
      path: Module path (selects the grammar; used in messages).

  Returns:
      ModuleScan: The module's direct exports, re-exports and imports.

  Raises:
      barrel_migrator.source.parser.ParseError: If the text cannot be parsed.
  """
  scan = scan_tree(parse(text, path))
  logger.debug("Scanned %s: %d exports, %d imports", path, len(scan.exports), len(scan.imports))
  return scan
