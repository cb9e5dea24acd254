"""
Static Analysis Package.

This package turns one Python source file into an immutable Analysis Context:
a concrete syntax tree with positions, comments, resolved symbols and
inferred expression types.

Modules:
    - ``context``: Building the Analysis Context (the two-case build result).
    - ``symbols``: Immutable symbol, type and package records.
    - ``loader``: Static loading of imported modules.
    - ``resolver``: Binding identifiers to declarations.
    - ``inference``: Inferring expression types and member selections.
    - ``comments``: Grouping comments by the node that owns them.
"""

from cstlens.analysis.context import AnalysisContext, ContextFailure, build_context, describe_package
from cstlens.analysis.symbols import ImportedModule, PackageInfo, Selection, Symbol, SymbolInfo, TypeAndValue

__all__ = [
  "AnalysisContext",
  "ContextFailure",
  "ImportedModule",
  "PackageInfo",
  "Selection",
  "Symbol",
  "SymbolInfo",
  "TypeAndValue",
  "build_context",
  "describe_package",
]
