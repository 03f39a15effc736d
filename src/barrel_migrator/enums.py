"""
Enumerations for barrel-migrator.

This module defines the enumerations shared by the scanner, the symbol catalog
and the rewrite planner.
"""

from enum import Enum


class ExportKind(str, Enum):
  """
  How a binding is exported by its module.
  """

  NAMED = "named"
  DEFAULT = "default"  # `export default ...`, including the identifier alias of a named default


class ResolutionStatus(str, Enum):
  """
  Outcome of looking a name up in a symbol catalog.
  """

  INTERNAL = "internal"  # Declared by exactly one (post-disambiguation) package module
  EXTERNAL = "external"  # Re-exported from a third-party specifier
  IGNORED = "ignored"  # Declared only in a module matching an ignore pattern
  UNRESOLVED = "unresolved"  # Unknown to the catalog
