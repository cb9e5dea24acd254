"""
Inspection Views.

Each view renders one aspect of an Analysis Context as plain text lines:

    - ``ast``: syntax dump with positions.
    - ``callobj``: resolved object of every identifier, in tree-walk order.
    - ``uses`` / ``defs``: identifier -> symbol tables.
    - ``types``: expression -> type table.
    - ``comments``: comment group texts.
    - ``imports``: direct imports and their exported names.
"""

from cstlens.views.registry import DEFAULT_VIEWS, ViewRegistry, should_skip

__all__ = ["DEFAULT_VIEWS", "ViewRegistry", "should_skip"]
