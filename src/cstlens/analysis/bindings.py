"""
Name Bindings.

A :class:`Binding` is the mutable, in-progress form of a :class:`Symbol`: one
per name per scope, accumulating every syntax node that binds the name. Once
type inference is complete, bindings are frozen into immutable symbols.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

import libcst as cst
from libcst.metadata import ClassScope, ComprehensionScope, FunctionScope, GlobalScope, Scope

from cstlens.analysis.symbols import Symbol
from cstlens.enums import SymbolKind
from cstlens.utils.node_source import get_full_name


def scope_prefix(scope: Optional[Scope]) -> str:
  """
  Renders the qualified-name prefix of a scope.

  Classes contribute their name, functions ``<name>.<locals>`` and
  comprehensions ``<comprehension>``. The module scope is empty.

  Args:
      scope: A LibCST scope (None is treated as the module scope).

  Returns:
      str: Dotted prefix, e.g. ``Widget.render.<locals>``.
  """
  if scope is None or isinstance(scope, GlobalScope):
    return ""
  parent = scope_prefix(scope.parent) if scope.parent is not scope else ""
  if isinstance(scope, ClassScope):
    part = scope.name or ""
  elif isinstance(scope, FunctionScope):
    part = f"{scope.name or '<lambda>'}.<locals>"
  elif isinstance(scope, ComprehensionScope):
    part = "<comprehension>"
  else:
    part = ""
  return ".".join(p for p in (parent, part) if p)


@dataclass(eq=False)
class Binding:
  """
  A name bound in one scope of the analysed module.

  Attributes:
      name: The bound identifier.
      kind: What the name denotes.
      package: Dotted module path of the analysed file.
      scope: Qualified scope prefix.
      nodes: Binding sites (Name targets, definitions, parameters, attribute
          targets for fields).
      external: Resolved symbol for names supplied by another module
          (imports, star imports, builtins).
      owner: The class owning a method or field, if any.
  """

  name: str
  kind: SymbolKind
  package: str
  scope: str = ""
  nodes: List[cst.CSTNode] = field(default_factory=list)
  external: Optional[Symbol] = None
  owner: Optional[cst.ClassDef] = None

  def freeze(self, type_str: Optional[str]) -> Symbol:
    """
    Produces the immutable symbol.

    Args:
        type_str: The inferred type, or None when unknown.

    Returns:
        Symbol: The frozen record.
    """
    origin = ""
    if self.external is not None and self.kind == SymbolKind.IMPORT:
      origin = self.external.origin
    return Symbol(
      name=self.name,
      kind=self.kind,
      package=self.package,
      scope=self.scope,
      type=type_str or "Any",
      origin=origin,
    )


def decorator_names(func: cst.FunctionDef) -> Set[str]:
  """
  Returns the dotted names of a function's decorators (calls are unwrapped).
  """
  names = set()
  for decorator in func.decorators:
    expr = decorator.decorator
    if isinstance(expr, cst.Call):
      expr = expr.func
    names.add(get_full_name(expr))
  return names


def receiver_param(func: cst.FunctionDef) -> Optional[cst.Param]:
  """
  Returns the implicit receiver (``self``/``cls``) of a method, if it has one.
  """
  if "staticmethod" in decorator_names(func):
    return None
  positional = list(func.params.posonly_params) + list(func.params.params)
  return positional[0] if positional else None
