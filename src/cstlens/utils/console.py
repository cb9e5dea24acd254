"""
Central Logging and Console Utilities.

This module unifies the application's diagnostic output using the Python standard
`logging` library, backed by `rich` for formatting.

Diagnostics (skipped paths, parse failures, type check failures) always go to the
standard error stream. Inspection view output is plain text written to stdout by
the callers themselves and never passes through this module, so that rich markup
never mangles rendered source such as ``list[int]``.

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text
from rich.theme import Theme

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
  }
)

logger = logging.getLogger("cstlens")


def _make_console() -> Console:
  return Console(theme=_THEME, stderr=True, soft_wrap=True)


class _DiagnosticHandler(RichHandler):
  """
  A RichHandler that renders each record as one unwrapped line.

  Records carrying a traceback keep the stock grid layout.
  """

  def render(self, *, record, traceback, message_renderable):
    if traceback is not None:
      return super().render(record=record, traceback=traceback, message_renderable=message_renderable)
    return Text.assemble(self.get_level_text(record), " ", message_renderable, no_wrap=True, overflow="ignore")


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  All printing operations are forwarded to a swappable backend. When the backend
  changes, the `cstlens` logger's Rich handler is rebuilt so that log records
  follow it.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    self._backend: Console = _make_console()
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Resets the proxy to a fresh standard error console."""
    self._backend = _make_console()
    self._configure_logging()

  @property
  def backend(self) -> Console:
    return self._backend

  def _configure_logging(self) -> None:
    # Remove existing RichHandlers to prevent duplicate logs/wrong destinations
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)

    rich_handler = _DiagnosticHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    logger.setLevel(logging.INFO)
    logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Global helper to inject a specific console instance.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Global helper to reset logging and console to standard error."""
  console.reset()


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message content. File names and reasons are escaped.
  """
  logger.info(escape(msg), extra={"markup": True})


def log_success(msg: str) -> None:
  """
  Logs a success message.

  Args:
      msg (str): The message content.
  """
  logger.log(SUCCESS_LEVEL_NUM, escape(msg), extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning message.

  Args:
      msg (str): The message content.
  """
  logger.warning(escape(msg), extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message.

  Args:
      msg (str): The message content.
  """
  logger.error(escape(msg), extra={"markup": True})
