"""
cstlens Package.

Static introspection of Python source files: a per-file Analysis Context
(concrete syntax tree, positions, comments, resolved symbols and inferred
types), seven plain-text inspection views over it, and a policy rule that
reports imports of blocklisted modules.

Usage
-----

Inspecting a file
^^^^^^^^^^^^^^^^^

.. code-block:: python

    import cstlens

    ctx = cstlens.build_context("app/models.py")
    if isinstance(ctx, cstlens.ContextFailure):
        print(ctx)
    else:
        for line in cstlens.DEFAULT_VIEWS["types"](ctx):
            print(line)

Checking imports
^^^^^^^^^^^^^^^^

.. code-block:: python

    from cstlens import RuleEngine, new_unsafe_import_rule

    engine = RuleEngine([new_unsafe_import_rule("G702")])
    for issue in engine.scan(["app/models.py"]):
        print(issue)
"""

from cstlens.analysis.context import AnalysisContext, ContextFailure, build_context
from cstlens.config import RuntimeConfig
from cstlens.rules import Issue, RuleEngine, new_blocklisted_imports, new_unsafe_import_rule
from cstlens.views.registry import DEFAULT_VIEWS, ViewRegistry

__version__ = "0.0.1"

__all__ = [
  "AnalysisContext",
  "ContextFailure",
  "DEFAULT_VIEWS",
  "Issue",
  "RuleEngine",
  "RuntimeConfig",
  "ViewRegistry",
  "build_context",
  "new_blocklisted_imports",
  "new_unsafe_import_rule",
  "__version__",
]
