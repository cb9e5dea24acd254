"""
Exception hierarchy for cstlens.

Errors raised inside the analysis pipeline never escape ``build_context``;
they are converted into a ``ContextFailure`` there. Selection errors are the
only ones meant to reach the caller, at startup.
"""


class CstLensError(Exception):
  """Base class for all cstlens errors."""


class ResolutionError(CstLensError):
  """
  Raised when a parsed module fails symbol or type resolution.
  """


class ImportResolutionError(ResolutionError):
  """
  Raised when an imported module cannot be located or loaded.

  Attributes:
      module (str): The dotted module path that failed to resolve.
  """

  def __init__(self, module: str, reason: str):
    super().__init__(f"could not import {module!r}: {reason}")
    self.module = module


class UnknownViewError(CstLensError, ValueError):
  """
  Raised when an inspection view is selected by a name the registry does not know.
  """
