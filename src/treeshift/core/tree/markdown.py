"""Render item trees as markdown."""

import io

from treeshift.config import ROOT_ID
from treeshift.core.tree.model import children_of, find_item
from treeshift.errors import ItemNotFoundError
from treeshift.models.item import Tree, TreeItem


def render_tree_as_markdown(
    tree: Tree,
    *,
    root_id: str = ROOT_ID,
    max_depth: int | None = None,
    only_open: bool = False,
) -> str:
    """Render a subtree (or the whole forest) as indented markdown.

    Args:
        tree: The forest to render from.
        root_id: Item to start from; the root sentinel renders every top-level item.
        max_depth: Max levels below the start to include (None = unlimited).
        only_open: Descend only into expanded items, like the tree view does.

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    if root_id == ROOT_ID:
        start: Tree = tree
    else:
        item = find_item(tree, root_id)
        if item is None:
            raise ItemNotFoundError(root_id)
        start = (item,)

    out = io.StringIO()
    _render(out, start, depth=0, max_depth=max_depth, only_open=only_open)
    return out.getvalue()


def _render(
    out: io.StringIO,
    items: Tree,
    *,
    depth: int,
    max_depth: int | None,
    only_open: bool,
) -> None:
    indent = "    " * depth
    for item in items:
        out.write(f"{indent}- {_format_item(item)}\n")
        if not item.has_children:
            continue

        # Truncation indicator when children are cut off by depth or collapse
        cut_by_depth = max_depth is not None and depth >= max_depth
        cut_by_collapse = only_open and not item.is_open
        if cut_by_depth or cut_by_collapse:
            child_count = len(item.children)
            noun = "child" if child_count == 1 else "children"
            out.write(f"{indent}    - ... ({child_count} more {noun}, id={item.id})\n")
            continue

        _render(out, item.children, depth=depth + 1, max_depth=max_depth, only_open=only_open)


def _format_item(item: TreeItem) -> str:
    color = f" [{item.color}]" if item.color else ""
    return f"{item.label}{color} (id={item.id})"


def render_children_summary(tree: Tree, parent_id: str) -> str:
    """One line per direct child, numbered by 1-based position."""
    return "\n".join(
        f"{position}. {_format_item(child)}"
        for position, child in enumerate(children_of(tree, parent_id), start=1)
    )
