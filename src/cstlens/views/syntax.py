"""
Syntax Dump View.

Renders the concrete syntax tree of a file, depth-first in declaration order,
one node per line with its field label and position. Formatting-only parts of
the tree (whitespace, commas, parentheses, brackets, blank lines) are omitted
so the dump reads like an abstract syntax tree.

Example output::

    Module (1:1)
      body[0]: SimpleStatementLine (1:1)
        body[0]: Import (1:1)
          names[0]: ImportAlias (1:8)
            name: Name (1:8) value='os'
"""

import dataclasses
from typing import List

import libcst as cst

from cstlens.analysis.context import AnalysisContext
from cstlens.utils.node_source import format_position

FORMATTING_NODES = (
  cst.BaseParenthesizableWhitespace,
  cst.Comma,
  cst.Colon,
  cst.Dot,
  cst.AssignEqual,
  cst.Semicolon,
  cst.LeftParen,
  cst.RightParen,
  cst.LeftSquareBracket,
  cst.RightSquareBracket,
  cst.LeftCurlyBrace,
  cst.RightCurlyBrace,
  cst.EmptyLine,
  cst.TrailingWhitespace,
  cst.Newline,
)

FORMATTING_FIELDS = frozenset(
  {
    "default_indent",
    "default_newline",
    "encoding",
    "footer",
    "has_trailing_newline",
    "header",
    "indent",
    "leading_lines",
    "lines_after_decorators",
    "lpar",
    "rpar",
  }
)


def _is_formatting(field_name: str, value: object) -> bool:
  return field_name in FORMATTING_FIELDS or field_name.startswith("whitespace") or isinstance(value, FORMATTING_NODES)


def _scalars(node: cst.CSTNode) -> str:
  parts = []
  for field in dataclasses.fields(node):
    value = getattr(node, field.name)
    if isinstance(value, (str, int)) and value != "" and not _is_formatting(field.name, value):
      parts.append(f"{field.name}={value!r}")
  return " ".join(parts)


def _dump(ctx: AnalysisContext, node: cst.CSTNode, label: str, depth: int, out: List[str]) -> None:
  position = ctx.position_of(node)
  header = f"{'  ' * depth}{label}{type(node).__name__}"
  if position is not None:
    header += f" ({format_position(position)})"
  scalars = _scalars(node)
  if scalars:
    header += f" {scalars}"
  out.append(header)

  for field in dataclasses.fields(node):
    value = getattr(node, field.name)
    if _is_formatting(field.name, value):
      continue
    if isinstance(value, cst.CSTNode):
      _dump(ctx, value, f"{field.name}: ", depth + 1, out)
    elif isinstance(value, (list, tuple)):
      index = 0
      for item in value:
        if isinstance(item, cst.CSTNode) and not isinstance(item, FORMATTING_NODES):
          _dump(ctx, item, f"{field.name}[{index}]: ", depth + 1, out)
          index += 1


def dump_ast(ctx: AnalysisContext) -> List[str]:
  """
  Renders the syntax tree of the context.

  Args:
      ctx: The analysed file.

  Returns:
      List[str]: One line per node, indented by depth.
  """
  out: List[str] = []
  _dump(ctx, ctx.tree, "", 0, out)
  return out
