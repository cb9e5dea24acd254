"""
Node Source Rendering.

Converts arbitrary LibCST nodes into their textual source representation "in
vacuum". Views use the rendered text as the sort key of unordered symbol tables,
and the policy rules use it to normalise import paths.
"""

from typing import Optional, Union

import libcst as cst

# A dummy module used as a context to render detached nodes.
_RENDER_CTX = cst.parse_module("")


def capture_node_source(node: cst.CSTNode, module: Optional[cst.Module] = None) -> str:
  """
  Renders a LibCST node into its Python source code string representation.

  Args:
      node: The CST node to serialise.
      module: The module the node belongs to. Its indentation and newline
          defaults are used when given.

  Returns:
      str: The Python code string, stripped of surrounding whitespace.
  """
  ctx = module or _RENDER_CTX
  try:
    return ctx.code_for_node(node).strip()
  except Exception:
    # Fallback for detached sentinel-like nodes
    return f"<Unrepresentable Node: {type(node).__name__}>"


def get_full_name(node: Union[cst.Name, cst.Attribute, cst.CSTNode]) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
      node: Typically a `cst.Name` (e.g., `x`) or `cst.Attribute` (e.g., `x.y`).

  Returns:
      str: The dotted name, or an empty string for unsupported nodes.

  Example:
      >>> get_full_name(cst.Attribute(value=cst.Name("os"), attr=cst.Name("path")))
      'os.path'
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    base = get_full_name(node.value)
    return f"{base}.{node.attr.value}" if base else ""
  return ""


def root_name(node: cst.BaseExpression) -> Optional[cst.Name]:
  """
  Unwraps an Attribute chain to its leftmost Name, e.g. ``os`` in ``os.path.join``.

  Args:
      node: The expression to unwrap.

  Returns:
      The leftmost Name node, or None when the chain does not start with a Name.
  """
  curr = node
  while isinstance(curr, cst.Attribute):
    curr = curr.value
  return curr if isinstance(curr, cst.Name) else None


def normalize_import_path(raw: str) -> str:
  """
  Strips surrounding whitespace and quote characters from an import path.

  Args:
      raw: The import path as written or rendered.

  Returns:
      str: The bare dotted module path.
  """
  return raw.strip().strip("\"'").strip()


def format_position(code_range) -> str:
  """
  Renders the start of a LibCST ``CodeRange`` as ``line:column``.

  Both numbers are 1-based, as compilers and editors report them.

  Args:
      code_range: A ``CodeRange`` from the ``PositionProvider``.

  Returns:
      str: e.g. ``3:5``.
  """
  return f"{code_range.start.line}:{code_range.start.column + 1}"
