"""
Tree-sitter Front-End for ECMAScript Modules.

This module turns the text of a TypeScript / JavaScript module into a tree-sitter
syntax tree. It is the only place in the project that knows which grammar is
used for which file type:

- ``.ts``, ``.mts``, ``.cts``: the TypeScript grammar, falling back to TSX
  (many code bases put JSX in plain ``.ts`` files).
- ``.tsx``, ``.js``, ``.jsx``, ``.mjs``, ``.cjs`` and anything else: the TSX
  grammar, which is a superset of JavaScript with JSX.

Tree-sitter is error tolerant; a tree containing error nodes is reported as a
:class:`ParseError` so callers can treat the module as unparseable.
"""

import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePosixPath
from typing import Tuple

import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser

_TS_SUFFIXES = {".ts", ".mts", ".cts"}
_LOCAL = threading.local()


class ParseError(SyntaxError):
  """Raised when a module's text cannot be parsed by any applicable grammar."""


@dataclass(frozen=True)
class SourceTree:
  """
  A parsed module.

  Attributes:
      source (bytes): The UTF-8 encoded text the tree was built from. All node
          offsets index into this buffer.
      root (Node): The ``program`` node.
      dialect (str): Grammar that produced the tree ('typescript' or 'tsx').
  """

  source: bytes
  root: Node
  dialect: str

  def text(self, node: Node) -> str:
    """
    Returns the source text spanned by a node.

    Args:
        node: A node of this tree.

    Returns:
        str: Decoded text.
    """
    return self.source[node.start_byte : node.end_byte].decode("utf-8")


@lru_cache(maxsize=None)
def _language(dialect: str) -> Language:
  if dialect == "typescript":
    return Language(tsts.language_typescript())
  return Language(tsts.language_tsx())


def _parser(dialect: str) -> Parser:
  # Parsers are not shared between worker threads.
  parsers = getattr(_LOCAL, "parsers", None)
  if parsers is None:
    parsers = _LOCAL.parsers = {}
  if dialect not in parsers:
    parsers[dialect] = Parser(_language(dialect))
  return parsers[dialect]


def dialects_for(path: str) -> Tuple[str, ...]:
  """
  Lists the grammars to try for a file, in order of preference.

  Args:
      path: File path or name; only the suffix matters.

  Returns:
      Tuple[str, ...]: Dialect names.
  """
  if PurePosixPath(path).suffix.lower() in _TS_SUFFIXES:
    return ("typescript", "tsx")
  return ("tsx",)


def parse(text: str, path: str = "module.ts") -> SourceTree:
  """
  Parses module text.

  Args:
      text: The module source.
      path: The module path, used to select the grammar and in error messages.

  Returns:
      SourceTree: The first error-free parse.

  Raises:
      ParseError: If every applicable grammar produced error nodes.
  """
  source = text.encode("utf-8")
  for dialect in dialects_for(path):
    tree = _parser(dialect).parse(source)
    if not tree.root_node.has_error:
      return SourceTree(source=source, root=tree.root_node, dialect=dialect)

  raise ParseError(f"Unable to parse {path}")
