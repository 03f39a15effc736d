"""
File System Helpers.

Enumerates module files under a root with include/exclude glob patterns and
reads/writes their text. Paths handed to the rest of the system are POSIX
strings relative to the enumeration root, so results are identical on every
platform.

Glob matching uses :func:`fnmatch.fnmatchcase`, where ``*`` also matches ``/``.
A leading ``**/`` additionally matches at the root (``**/*.ts`` matches
``index.ts``).
"""

import fnmatch
import os
from pathlib import Path
from typing import Iterable, List, Sequence, Union

PathLike = Union[str, Path]


def path_matches_glob(path: str, pattern: str) -> bool:
  """
  Tests a relative path against a glob pattern.

  Args:
      path: Relative path (either separator).
      pattern: Shell-style glob.

  Returns:
      bool: True if the path matches.

  Example:
      >>> path_matches_glob("index.ts", "**/*.ts")
      True
      >>> path_matches_glob("a/node_modules/x.ts", "**/node_modules/**")
      True
  """
  normalized_path = path.replace("\\", "/")
  normalized_pattern = pattern.replace("\\", "/")
  if fnmatch.fnmatchcase(normalized_path, normalized_pattern):
    return True
  if normalized_pattern.startswith("**/"):
    return fnmatch.fnmatchcase(normalized_path, normalized_pattern[3:])
  return False


def matches_any(path: str, patterns: Iterable[str]) -> bool:
  """Returns True if ``path`` matches at least one of ``patterns``."""
  return any(path_matches_glob(path, p) for p in patterns)


def _is_excluded_dir(rel_dir: str, exclude: Sequence[str]) -> bool:
  # A directory is pruned when any file inside it would be excluded.
  return matches_any(f"{rel_dir}/", exclude) or matches_any(f"{rel_dir}/_", exclude)


def enumerate_files(root: PathLike, include: Sequence[str], exclude: Sequence[str] = ()) -> List[str]:
  """
  Lists files below ``root`` matching ``include`` and none of ``exclude``.

  Symbolic links to directories are not followed and excluded directories are
  not descended into.

  Args:
      root: Directory to walk.
      include: Glob patterns a file must match (at least one).
      exclude: Glob patterns that remove files (and prune directories).

  Returns:
      List[str]: Sorted POSIX paths relative to ``root``.
  """
  root_path = Path(root)
  found: List[str] = []

  for dirpath, dirnames, filenames in os.walk(root_path):
    rel_dir = Path(dirpath).relative_to(root_path).as_posix()
    prefix = "" if rel_dir == "." else f"{rel_dir}/"

    dirnames[:] = sorted(d for d in dirnames if not _is_excluded_dir(f"{prefix}{d}", exclude))

    for name in filenames:
      rel_path = f"{prefix}{name}"
      if not matches_any(rel_path, include):
        continue
      if matches_any(rel_path, exclude):
        continue
      found.append(rel_path)

  return sorted(found)


def read_text(path: PathLike) -> str:
  """
  Reads a UTF-8 text file without newline translation.

  Args:
      path: File to read.

  Returns:
      str: File contents.
  """
  with open(path, "rt", encoding="utf-8", newline="") as f:
    return f.read()


def write_text(path: PathLike, text: str) -> None:
  """
  Writes a UTF-8 text file, replacing its contents wholesale.

  Newlines are written exactly as present in ``text``.

  Args:
      path: File to write.
      text: New contents.
  """
  with open(path, "wt", encoding="utf-8", newline="") as f:
    f.write(text)
