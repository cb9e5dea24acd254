"""
CLI Command Handlers Facade.

Re-exports the handlers from `cstlens.cli.handlers` so that the dispatcher and
tests share one patch target.
"""

from cstlens.cli.handlers.inspection import handle_inspect
from cstlens.cli.handlers.scan import handle_scan

__all__ = [
  "handle_inspect",
  "handle_scan",
]
