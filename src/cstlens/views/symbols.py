"""
Symbol Table Views.

Dumps of the resolved symbol tables of an Analysis Context:

- ``callobj``: every resolved identifier in tree-walk order, as an OBJECT block.
- ``uses`` / ``defs``: identifier -> symbol pairs.
- ``types``: expression -> type pairs.

The tables are unordered mappings, so the table dumps sort by the rendered
source text of the key, breaking ties by position. Output is therefore
identical across runs on the same input.
"""

from typing import List, Mapping, Tuple

import libcst as cst

from cstlens.analysis.context import AnalysisContext
from cstlens.analysis.symbols import Symbol
from cstlens.utils.node_source import format_position


def object_block(symbol: Symbol) -> List[str]:
  """
  Renders the fields of a resolved symbol.

  Args:
      symbol: The symbol to describe.

  Returns:
      List[str]: The ``OBJECT`` header followed by indented fields.
  """
  return [
    "OBJECT",
    f'   Package = package {symbol.package_name} ("{symbol.package}")',
    f"   Path = {symbol.package}",
    f"   Name = {symbol.name}",
    f"   Kind = {symbol.kind.value}",
    f"   Type = {symbol.type}",
    f"   Id = {symbol.id}",
  ]


def dump_callobj(ctx: AnalysisContext) -> List[str]:
  """
  Prints every identifier that resolves to a symbol, in tree-walk order.

  Attribute members (``attr`` in ``value.attr``) are identifiers too and are
  resolved like any other name.
  """
  out: List[str] = []
  for node in ctx.walk():
    if isinstance(node, cst.Name):
      symbol = ctx.object_of(node)
      if symbol is not None:
        out.extend(object_block(symbol))
  return out


def _sorted_entries(ctx: AnalysisContext, table: Mapping[cst.CSTNode, object]) -> List[Tuple[str, str, object]]:
  entries = []
  for node, value in table.items():
    position = ctx.position_of(node)
    sort_pos = (position.start.line, position.start.column) if position is not None else (0, 0)
    rendered_pos = format_position(position) if position is not None else "-"
    text = ctx.code_for(node).replace("\n", "\\n")
    entries.append((text, sort_pos, rendered_pos, value))
  entries.sort(key=lambda e: (e[0], e[1]))
  return [(text, pos, value) for text, _, pos, value in entries]


def _table_lines(ctx: AnalysisContext, table: Mapping, label: str, value_label: str) -> List[str]:
  return [f"{label}: {text} ({pos}), {value_label}: {value}" for text, pos, value in _sorted_entries(ctx, table)]


def dump_uses(ctx: AnalysisContext) -> List[str]:
  """Lists identifier -> referenced symbol pairs, sorted by identifier text."""
  return _table_lines(ctx, ctx.info.uses, "IDENT", "OBJECT")


def dump_defs(ctx: AnalysisContext) -> List[str]:
  """Lists identifier -> declared symbol pairs, sorted by identifier text."""
  return _table_lines(ctx, ctx.info.defs, "IDENT", "OBJECT")


def dump_types(ctx: AnalysisContext) -> List[str]:
  """Lists expression -> type pairs, sorted by expression text."""
  return _table_lines(ctx, ctx.info.types, "EXPR", "TYPE")
