"""
Enumerations for cstlens.

This module defines the standard enumerations shared by the analysis context,
the inspection views and the policy rules.
"""

from enum import Enum


class Severity(str, Enum):
  """
  Impact level attached to an Issue raised by a policy rule.
  """

  LOW = "LOW"
  MEDIUM = "MEDIUM"
  HIGH = "HIGH"


class Confidence(str, Enum):
  """
  How certain a policy rule is that its finding is a genuine problem.
  """

  LOW = "LOW"
  MEDIUM = "MEDIUM"
  HIGH = "HIGH"


class SymbolKind(str, Enum):
  """
  Category of a resolved declaration.
  """

  MODULE = "module"
  CLASS = "class"
  FUNCTION = "func"
  VARIABLE = "var"
  PARAMETER = "param"
  FIELD = "field"  # self.x = ... inside a method
  IMPORT = "import"  # bound by an import statement
  BUILTIN = "builtin"


class SelectionKind(str, Enum):
  """
  Member access semantics of an ``obj.attr`` expression.
  """

  FIELD_VAL = "field"  # instance.field
  METHOD_VAL = "method"  # instance.method (bound)
  METHOD_EXPR = "method-expr"  # Class.method (unbound)


class FailureStage(str, Enum):
  """
  Pipeline step at which building an Analysis Context failed.
  """

  READ = "read"
  PARSE = "parse"
  RESOLVE = "resolve"
