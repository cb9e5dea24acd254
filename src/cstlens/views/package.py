"""
Package Views.

- ``comments``: the text of every comment group, in source order.
- ``imports``: each direct import of the file with the names it exports.
"""

from typing import List

from cstlens.analysis.context import AnalysisContext


def dump_comments(ctx: AnalysisContext) -> List[str]:
  """
  Lists each comment group's text followed by an empty line.

  Args:
      ctx: The analysed file.

  Returns:
      List[str]: Output lines (group text may itself span several lines).
  """
  out: List[str] = []
  for group in ctx.comments.groups():
    out.extend(group.text.split("\n"))
    out.append("")
  return out


def dump_imports(ctx: AnalysisContext) -> List[str]:
  """
  Lists every direct import as ``<path> <name>``, followed by one
  ``  =>  <name>`` line per name in the imported module's top-level scope.
  """
  out: List[str] = []
  for imported in ctx.package.imports:
    out.append(f"{imported.path} {imported.name}")
    out.extend(f"  =>  {name}" for name in imported.exported)
  return out
