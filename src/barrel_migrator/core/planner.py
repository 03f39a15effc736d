"""
Rewrite Planner.

Decides, for one consumer module, where each binding imported from a package
root should be imported from instead:

- **External**: names the package re-exports from a third-party specifier are
  imported from that specifier, under the name it really exports.
- **Internal**: names with a (disambiguated) declaring module that is not
  ignored are imported from ``<package>/<module path>``.
- **Remainder**: default imports of the root, names declared only in ignored
  modules and unresolved names keep importing from the package root.
  Unresolved names produce a warning.

Bindings resolving to the same target are merged into one declaration. The
remainder declaration comes first, then one declaration per target in the order
targets were first encountered. The planner is pure; :func:`apply_plan`
turns a plan into new module text.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Tuple

from barrel_migrator.core.catalog import SymbolCatalog
from barrel_migrator.core.declarations import ImportDeclaration
from barrel_migrator.core.locator import ImportSite
from barrel_migrator.enums import ResolutionStatus
from barrel_migrator.source.printer import (
  ImportBinding,
  TextEdit,
  apply_edits,
  detect_newline,
  removal_span,
  render_import,
)

_MODULE_EXTENSION = re.compile(r"(\.d)?\.(js|jsx|ts|tsx|mjs|cjs)$")


@dataclass(frozen=True)
class ImportGroup:
  """
  Bindings that will share one import declaration.

  Attributes:
      specifier: Target specifier of the declaration.
      bindings: Bindings in encounter order.
      external: Target is a third-party specifier.
  """

  specifier: str
  bindings: Tuple[ImportBinding, ...] = ()
  external: bool = False

  def render(self, quote: str = '"', semicolon: bool = True) -> str:
    """Renders the group as an import declaration."""
    return render_import(self.specifier, self.bindings, quote=quote, semicolon=semicolon)


@dataclass(frozen=True)
class RewritePlan:
  """
  Replacement import declarations for one consumer module.

  Attributes:
      path: The consumer module.
      remainder: Bindings staying on the package root (may be empty).
      groups: Resolved targets in first-encounter order.
      replaced: Original declarations the new ones replace.
      warnings: Unresolved-symbol messages.
      rewritten: Number of bindings routed to a resolved target.
  """

  path: str
  remainder: ImportGroup
  groups: Mapping[str, ImportGroup] = field(default_factory=dict)
  replaced: Tuple[ImportDeclaration, ...] = ()
  warnings: Tuple[str, ...] = ()
  rewritten: int = 0

  @property
  def changed(self) -> bool:
    """True iff at least one binding moved to a resolved target."""
    return self.rewritten > 0

  @property
  def declarations(self) -> List[ImportGroup]:
    """The new declarations in output order."""
    out = [self.remainder] if self.remainder.bindings else []
    out.extend(self.groups.values())
    return out


def _add_binding(bindings: List[ImportBinding], binding: ImportBinding) -> None:
  for idx, existing in enumerate(bindings):
    if existing.local == binding.local and existing.imported == binding.imported:
      if existing.type_only and not binding.type_only:
        bindings[idx] = binding
      return
  bindings.append(binding)


class RewritePlanner:
  """
  Plans import rewrites against one package's symbol catalog.
  """

  def __init__(self, catalog: SymbolCatalog, include_extension: bool = True):
    """
    Initializes the planner.

    Args:
        catalog: Catalog of the package whose root imports are rewritten.
        include_extension: Keep module file extensions in generated specifiers.
    """
    self.catalog = catalog
    self.package_name = catalog.package_name
    self.include_extension = include_extension

  def target_specifier(self, module_path: str) -> str:
    """
    Builds the direct specifier of a package module.

    Args:
        module_path: Path relative to the package root.

    Returns:
        str: e.g. ``@scope/pkg/src/utils.ts``.
    """
    path = module_path if self.include_extension else _MODULE_EXTENSION.sub("", module_path)
    return f"{self.package_name}/{path}"

  def plan(self, site: ImportSite) -> RewritePlan:
    """
    Plans the rewrite of one consumer module.

    Only declarations importing the package root itself are rewritten;
    subpath, namespace and side-effect imports are left as they are.

    Args:
        site: The consumer module and its qualifying declarations.

    Returns:
        RewritePlan: The plan; ``changed`` is False when nothing moves.
    """
    remainder: List[ImportBinding] = []
    groups: Dict[str, List[ImportBinding]] = {}
    external_targets = set()
    replaced: List[ImportDeclaration] = []
    warnings: List[str] = []
    rewritten = 0

    for decl in site.declarations:
      if decl.specifier != self.package_name:
        continue
      if decl.namespace is not None or decl.is_side_effect:
        continue
      replaced.append(decl)

      for binding in decl.bindings:
        type_only = decl.type_only or binding.type_only
        original = ImportBinding(local=binding.local, imported=binding.imported, type_only=type_only)

        if binding.is_default:
          _add_binding(remainder, original)
          continue

        resolution = self.catalog.resolve(binding.imported)

        if resolution.status == ResolutionStatus.EXTERNAL and resolution.external:
          target = resolution.external.specifier
          moved = ImportBinding(local=binding.local, imported=resolution.external.imported_name, type_only=type_only)
          _add_binding(groups.setdefault(target, []), moved)
          external_targets.add(target)
          rewritten += 1

        elif resolution.status == ResolutionStatus.INTERNAL and resolution.entry:
          target = self.target_specifier(resolution.entry.module.path)
          imported = "default" if resolution.entry.is_default else binding.imported
          moved = ImportBinding(local=binding.local, imported=imported, type_only=type_only)
          _add_binding(groups.setdefault(target, []), moved)
          rewritten += 1

        else:
          _add_binding(remainder, original)
          if resolution.status == ResolutionStatus.UNRESOLVED:
            warnings.append(f"{site.path}: could not resolve '{binding.imported}' from {self.package_name}")

    return RewritePlan(
      path=site.path,
      remainder=ImportGroup(specifier=self.package_name, bindings=tuple(remainder)),
      groups={
        target: ImportGroup(specifier=target, bindings=tuple(bindings), external=target in external_targets)
        for target, bindings in groups.items()
      },
      replaced=tuple(replaced),
      warnings=tuple(warnings),
      rewritten=rewritten,
    )


def apply_plan(text: str, plan: RewritePlan) -> str:
  """
  Regenerates module text from a plan.

  The rendered declarations replace the first rewritten declaration; the other
  rewritten declarations are removed. A removed declaration takes its line
  break only when it had the line to itself. Quote style and semicolons follow
  the first rewritten declaration.

  Args:
      text: The text the plan was computed from.
      plan: The rewrite plan.

  Returns:
      str: New text, or ``text`` unchanged if the plan changes nothing.
  """
  if not plan.changed or not plan.replaced:
    return text

  first = plan.replaced[0]
  newline = detect_newline(text)
  block = newline.join(group.render(quote=first.quote, semicolon=first.semicolon) for group in plan.declarations)

  source = text.encode("utf-8")
  edits = [TextEdit(first.start_byte, first.end_byte, block)]
  for decl in plan.replaced[1:]:
    start, end = removal_span(source, decl.start_byte, decl.end_byte)
    edits.append(TextEdit(start, end, ""))

  return apply_edits(text, edits)
