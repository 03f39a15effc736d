"""
Source Printer.

Regenerates module text after a rewrite. Rather than pretty-printing a whole
tree, the printer splices replacement text into byte spans of the original
buffer, so everything outside the replaced import declarations is preserved
byte for byte (comments, formatting, line endings).
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_BLANKS = (b" ", b"\t")


@dataclass(frozen=True)
class ImportBinding:
  """
  A single ``imported as local`` pair of an import declaration.
  """

  local: str
  imported: str
  type_only: bool = False

  @property
  def is_default(self) -> bool:
    """True for default imports (``import D from``)."""
    return self.imported == "default"


@dataclass(frozen=True)
class TextEdit:
  """
  Replacement of ``[start_byte, end_byte)`` of the UTF-8 encoded text.
  """

  start_byte: int
  end_byte: int
  replacement: str


def _export_name(name: str) -> str:
  # Arbitrary module namespace names (`import { "a-b" as ab }`) need quotes.
  return name if _IDENTIFIER.match(name) else f'"{name}"'


def _specifier_text(binding: ImportBinding, inline_type: bool) -> str:
  prefix = "type " if inline_type and binding.type_only else ""
  imported = _export_name(binding.imported)
  if binding.imported == binding.local:
    return f"{prefix}{imported}"
  return f"{prefix}{imported} as {binding.local}"


def render_import(specifier: str, bindings: Sequence[ImportBinding], quote: str = '"', semicolon: bool = True) -> str:
  """
  Renders one import declaration.

  Default bindings are emitted as the declaration's default clause where
  the syntax allows it and as ``default as X`` specifiers otherwise.
  ``import type`` is used when every binding is type-only; mixed
  declarations carry inline ``type`` modifiers.

  Args:
      specifier: Module specifier.
      bindings: Bindings in output order.
      quote: Quote character for the specifier.
      semicolon: Terminate the statement with ``;``.

  Returns:
      str: A single-line import declaration.

  Example:
      >>> render_import("x", [ImportBinding("a", "a"), ImportBinding("c", "b")])
      'import { a, b as c } from "x";'
  """
  all_type = bool(bindings) and all(b.type_only for b in bindings)
  defaults = [b for b in bindings if b.is_default]
  named = [b for b in bindings if not b.is_default]

  head: Optional[ImportBinding] = None
  if all_type:
    if len(defaults) == 1 and not named:
      head = defaults[0]
  else:
    head = next((b for b in defaults if not b.type_only), None)

  braced: List[str] = [_specifier_text(b, inline_type=not all_type) for b in defaults if b is not head]
  braced.extend(_specifier_text(b, inline_type=not all_type) for b in named)

  clause_parts: List[str] = []
  if head is not None:
    clause_parts.append(head.local)
  if braced:
    clause_parts.append("{ " + ", ".join(braced) + " }")

  keyword = "import type " if all_type else "import "
  end = ";" if semicolon else ""
  return f"{keyword}{', '.join(clause_parts)} from {quote}{specifier}{quote}{end}"


def line_end(source: bytes, offset: int) -> int:
  """
  Extends an offset over trailing blanks and one line break.

  Args:
      source: Encoded text.
      offset: End of a statement.

  Returns:
      int: Offset just past the line break, or ``offset`` if other content
      follows on the same line.
  """
  j = offset
  while j < len(source) and source[j : j + 1] in _BLANKS:
    j += 1
  if source[j : j + 2] == b"\r\n":
    return j + 2
  if source[j : j + 1] == b"\n":
    return j + 1
  return offset


def removal_span(source: bytes, start: int, end: int) -> Tuple[int, int]:
  """
  Widens a statement span so deleting it leaves no stray blanks or empty line.

  A statement alone on its line is removed with its line break. A statement
  sharing its line keeps the line break and takes the blanks in front of it
  (or, when it opens the line, the blanks after it) so that neighbouring code
  stays on its own line.

  Args:
      source: Encoded text.
      start: Start of the statement.
      end: End of the statement.

  Returns:
      Tuple[int, int]: The ``[start, end)`` range to delete.
  """
  i = start
  while i > 0 and source[i - 1 : i] in _BLANKS:
    i -= 1
  opens_line = i == 0 or source[i - 1 : i] == b"\n"

  if not opens_line:
    return i, end

  after = line_end(source, end)
  if after != end:
    return i, after
  j = end
  while j < len(source) and source[j : j + 1] in _BLANKS:
    j += 1
  return start, j


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
  """
  Applies non-overlapping byte-span edits.

  Args:
      text: Original text.
      edits: Edits against the UTF-8 encoding of ``text``.

  Returns:
      str: The edited text.

  Raises:
      ValueError: If two edits overlap.
  """
  source = text.encode("utf-8")
  ordered = sorted(edits, key=lambda e: e.start_byte)

  chunks: List[bytes] = []
  cursor = 0
  for edit in ordered:
    if edit.start_byte < cursor:
      raise ValueError(f"Overlapping edit at byte {edit.start_byte}")
    chunks.append(source[cursor : edit.start_byte])
    chunks.append(edit.replacement.encode("utf-8"))
    cursor = edit.end_byte
  chunks.append(source[cursor:])

  return b"".join(chunks).decode("utf-8")


def detect_newline(text: str) -> str:
  """Returns the line separator used by ``text``."""
  return "\r\n" if "\r\n" in text else "\n"
