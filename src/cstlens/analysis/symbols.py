"""
Resolved Symbol and Type Model.

Immutable records produced by the resolver and consumed by the inspection views
and the policy rules. All node-keyed mappings are keyed by node identity
(LibCST nodes hash and compare by identity), so two syntactically identical
expressions at different locations remain distinct keys.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import libcst as cst

from cstlens.enums import SelectionKind, SymbolKind


@dataclass(frozen=True)
class Symbol:
  """
  A resolved declaration: a module, class, function, variable, parameter,
  field, import binding or builtin.
  """

  name: str
  kind: SymbolKind
  package: str
  """Dotted path of the module owning the declaration (``builtins`` for builtins)."""
  scope: str = ""
  """Qualified scope prefix, e.g. ``Widget.render.<locals>``. Empty at module level."""
  type: str = "Any"
  origin: str = ""
  """For import bindings, the dotted path of the imported object."""

  @property
  def qualname(self) -> str:
    return f"{self.scope}.{self.name}" if self.scope else self.name

  @property
  def package_name(self) -> str:
    return self.package.rsplit(".", 1)[-1]

  @property
  def id(self) -> str:
    """Stable identifier, unique within the declaring scope."""
    return f"{self.package}:{self.qualname}"

  def __str__(self) -> str:
    return f"{self.kind.value} {self.package}.{self.qualname} {self.type}"


@dataclass(frozen=True)
class TypeAndValue:
  """
  The resolved type of an expression and, for literals, its constant value.
  """

  type: str
  value: Optional[str] = None

  def __str__(self) -> str:
    if self.value is None:
      return self.type
    return f"{self.type} = {self.value}"


@dataclass(frozen=True)
class Selection:
  """
  Resolution of an ``obj.attr`` member access on a class or instance.
  """

  kind: SelectionKind
  receiver: str
  obj: Symbol

  def __str__(self) -> str:
    return f"{self.kind.value} ({self.receiver}).{self.obj.name} {self.obj.type}"


@dataclass(frozen=True, eq=False)
class SymbolInfo:
  """
  Read-only indexed views over a resolved tree.

  Attributes:
      defs: Binding identifier -> declared Symbol.
      uses: Referencing identifier -> referenced Symbol.
      types: Expression -> resolved type (and constant value).
      selections: Attribute expression -> member selection.
  """

  defs: Mapping[cst.Name, Symbol]
  uses: Mapping[cst.Name, Symbol]
  types: Mapping[cst.BaseExpression, TypeAndValue]
  selections: Mapping[cst.Attribute, Selection]

  @classmethod
  def freeze(cls, defs, uses, types, selections) -> "SymbolInfo":
    """
    Wraps plain dictionaries into read-only mapping proxies.

    Returns:
        SymbolInfo: The immutable table.
    """
    return cls(
      defs=MappingProxyType(dict(defs)),
      uses=MappingProxyType(dict(uses)),
      types=MappingProxyType(dict(types)),
      selections=MappingProxyType(dict(selections)),
    )

  def object_of(self, name: cst.Name) -> Optional[Symbol]:
    """
    Resolves an identifier, preferring its use binding over its declaration.

    Args:
        name: The identifier node.

    Returns:
        The Symbol, or None if the identifier is not resolved.
    """
    symbol = self.uses.get(name)
    if symbol is None:
      symbol = self.defs.get(name)
    return symbol


@dataclass(frozen=True)
class ImportedModule:
  """
  A module imported directly by the analysed file.
  """

  path: str
  """The import path as written (relative imports keep their leading dots)."""
  name: str
  exported: Tuple[str, ...] = ()
  """Public names in the module's top-level scope, sorted."""
  file: str = ""
  """Source file of the module; empty for compiled modules."""


@dataclass(frozen=True)
class PackageInfo:
  """
  The resolved package of an analysed file.
  """

  name: str
  """Innermost package name (the module stem for a standalone script)."""
  module: str
  """Dotted module path of the analysed file."""
  path: str
  """Directory holding the analysed file."""
  file: str
  imports: Tuple[ImportedModule, ...] = ()
