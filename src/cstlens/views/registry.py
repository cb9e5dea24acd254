"""
View Dispatch Registry.

Maps view names to view functions and replays the selected views over a batch
of files. Selection is validated eagerly: an unknown name fails at selection
time with the sorted list of valid names, before any file is touched.

Replay is file-major. For each path (in input order) the registry skip-checks
the path once, then runs every selected view (in selection order, duplicates
included), building a fresh Analysis Context for each view. A file whose
context fails to build is abandoned after the failure is reported once; the
rest of the batch continues.
"""

import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, TextIO, Union

from cstlens.analysis.context import AnalysisContext, ContextFailure, build_context
from cstlens.errors import UnknownViewError
from cstlens.utils.console import log_warning
from cstlens.views.package import dump_comments, dump_imports
from cstlens.views.symbols import dump_callobj, dump_defs, dump_types, dump_uses
from cstlens.views.syntax import dump_ast

View = Callable[[AnalysisContext], List[str]]
Builder = Callable[[str], Union[AnalysisContext, ContextFailure]]

DEFAULT_VIEWS: Dict[str, View] = {
  "ast": dump_ast,
  "callobj": dump_callobj,
  "uses": dump_uses,
  "types": dump_types,
  "defs": dump_defs,
  "comments": dump_comments,
  "imports": dump_imports,
}


def should_skip(path: Union[str, Path]) -> bool:
  """
  Checks that a path names an existing regular file.

  Missing paths and directories are reported on the diagnostics channel as
  ``Skipping: <path> - <reason>``.

  Args:
      path: The candidate input.

  Returns:
      bool: True if the path must be skipped.
  """
  candidate = Path(path)
  try:
    candidate.stat()
  except OSError as e:
    log_warning(f"Skipping: {path} - {e.strerror or e}")
    return True
  if candidate.is_dir():
    log_warning(f"Skipping: {path} - directory")
    return True
  return False


class ViewRegistry:
  """
  Named, multi-select registry of inspection views.

  Attributes:
      selected (List[str]): View names in selection order.
  """

  def __init__(self, views: Optional[Mapping[str, View]] = None):
    """
    Initializes the registry.

    Args:
        views: Name -> view mapping. Defaults to the seven built-in views.
    """
    self._views: Dict[str, View] = dict(views if views is not None else DEFAULT_VIEWS)
    self.selected: List[str] = []

  def names(self) -> List[str]:
    """Returns the registered view names, sorted."""
    return sorted(self._views)

  def select(self, name: str) -> None:
    """
    Appends a view to the selection. Repeats are kept and run repeatedly.

    Args:
        name: A registered view name.

    Raises:
        UnknownViewError: If ``name`` is not registered.
    """
    if name not in self._views:
      raise UnknownViewError(f"unknown command '{name}', valid tools are: {', '.join(self.names())}")
    self.selected.append(name)

  def run(
    self,
    paths: Iterable[Union[str, Path]],
    out: Optional[TextIO] = None,
    builder: Builder = build_context,
  ) -> List[ContextFailure]:
    """
    Replays the selected views over ``paths``.

    Args:
        paths: Input files, processed in order.
        out: Destination of view output. Defaults to standard output.
        builder: Analysis Context factory (one call per file per view).

    Returns:
        List[ContextFailure]: One entry per file abandoned on a failed build.
    """
    out = out if out is not None else sys.stdout
    failures: List[ContextFailure] = []
    if not self.selected:
      return failures

    for path in paths:
      if should_skip(path):
        continue
      for name in self.selected:
        ctx = builder(str(path))
        if isinstance(ctx, ContextFailure):
          failures.append(ctx)
          break
        for line in self._views[name](ctx):
          out.write(f"{line}\n")
    return failures
