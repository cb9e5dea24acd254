from .inspection import handle_inspect
from .scan import handle_scan

__all__ = [
  "handle_inspect",
  "handle_scan",
]
