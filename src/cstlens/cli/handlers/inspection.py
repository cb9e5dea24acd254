"""
Inspect Command Handler.

Replays the selected inspection views over a batch of files and writes their
plain-text output to stdout.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from cstlens.config import RuntimeConfig
from cstlens.errors import UnknownViewError
from cstlens.utils.console import log_error, log_info
from cstlens.views.registry import ViewRegistry


def handle_inspect(files: List[Path], tools: Optional[List[str]] = None) -> int:
  """
  Runs the selected views over ``files``.

  Args:
      files: Input source files, in output order.
      tools: View names in selection order (repeats allowed). When empty, the
          ``tools`` configured in pyproject.toml are used.

  Returns:
      int: 0 once the batch has been processed (per-file failures are
      reported on stderr and do not change the exit code), 2 on an invalid
      configuration.
  """
  try:
    config = RuntimeConfig.load(tools=tools)
  except ValidationError as e:
    log_error(f"Invalid configuration: {e}")
    return 2

  registry = ViewRegistry()
  try:
    for name in config.tools:
      registry.select(name)
  except UnknownViewError as e:
    log_error(str(e))
    return 2

  if not registry.selected:
    log_info("No tools selected.")
    return 0

  failures = registry.run(files)
  if failures:
    log_info(f"{len(failures)} file(s) could not be analysed.")
  return 0
