"""
Terminal output for the migrator.

Progress and problems are reported through ``logging`` records, which a single
``RichHandler`` on the root logger renders. Tables and summaries are printed
straight to the console. Both share one Rich console, so a run's report and its
log lines arrive in the same stream.

The console object callers import never changes identity. Tests capture a run
by pointing it at a recording console with :func:`set_console`, and the CLI
turns on debug records of the catalog and planner with :func:`set_verbose`.
"""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Sits between INFO (20) and WARNING (30).
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "symbol": "bold magenta",
    "specifier": "cyan",
  }
)

_ICONS = {
  logging.INFO: "ℹ️  ",
  SUCCESS_LEVEL_NUM: "✅ ",
  logging.WARNING: "⚠️  ",
  logging.ERROR: "❌ ",
}


class _ConsoleProxy:
  """
  Stable stand-in for whichever Rich console is currently active.

  Attribute access is forwarded, so ``console.print`` and ``console.width``
  behave like the wrapped console. The proxy owns exactly one handler on the
  root logger and replaces it whenever the target console changes.
  """

  def __init__(self) -> None:
    self._target: Console = Console(theme=_THEME)
    self._level = logging.INFO
    self._handler: Optional[RichHandler] = None
    self._install_handler()

  @property
  def backend(self) -> Console:
    return self._target

  def retarget(self, target: Console, level: Optional[int] = None) -> None:
    """
    Sends prints and log records to ``target``.

    Args:
        target: Console that receives all further output.
        level: New root logger level; the current one is kept if omitted.
    """
    self._target = target
    if level is not None:
      self._level = level
    self._install_handler()

  def set_level(self, level: int) -> None:
    self._level = level
    logging.getLogger().setLevel(level)

  def _install_handler(self) -> None:
    root = logging.getLogger()
    # At most one RichHandler on the root logger.
    for handler in list(root.handlers):
      if isinstance(handler, RichHandler):
        root.removeHandler(handler)

    self._handler = RichHandler(
      console=self._target,
      show_time=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    root.addHandler(self._handler)
    root.setLevel(self._level)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._target.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._target, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """Routes tables and log records to ``new_console``."""
  console.retarget(new_console)


def reset_console() -> None:
  """Goes back to a themed stdout console at INFO level."""
  console.retarget(Console(theme=_THEME), level=logging.INFO)


def get_console() -> Console:
  """Returns the console output currently goes to."""
  return console.backend


def set_verbose(verbose: bool) -> None:
  """
  Shows or hides debug records.

  Debug records carry per-module detail such as catalog collisions and
  modules that match an ignore pattern.

  Args:
      verbose: True to show DEBUG records, False to stop at INFO.
  """
  console.set_level(logging.DEBUG if verbose else logging.INFO)


def _emit(level: int, msg: str) -> None:
  logging.log(level, f"{_ICONS[level]}{msg}", extra={"markup": True})


def log_info(msg: str) -> None:
  """Reports run progress. ``msg`` may carry Rich markup such as ``[path]``."""
  _emit(logging.INFO, msg)


def log_success(msg: str) -> None:
  """Reports a finished package or run at the SUCCESS level."""
  _emit(SUCCESS_LEVEL_NUM, msg)


def log_warning(msg: str) -> None:
  """Reports something skipped or left unresolved."""
  _emit(logging.WARNING, msg)


def log_error(msg: str) -> None:
  """Reports a failure, such as an unreadable package or a failed write."""
  _emit(logging.ERROR, msg)
