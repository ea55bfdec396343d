"""Tree navigation: breadcrumbs, siblings, visible rows."""

from treeshift.core.tree.model import children_of, find_item, index_of, item_mode, require_path
from treeshift.errors import ItemNotFoundError
from treeshift.models.item import Breadcrumb, Tree, TreeItem, VisibleRow


def get_breadcrumbs(tree: Tree, item_id: str) -> tuple[Breadcrumb, ...]:
    """Get ancestor breadcrumbs for an item.

    Returns breadcrumbs in order from root to immediate parent (excludes the item itself).
    """
    crumbs: list[Breadcrumb] = []
    for depth, ancestor_id in enumerate(require_path(tree, item_id)):
        ancestor = find_item(tree, ancestor_id)
        if ancestor is None:
            raise ItemNotFoundError(ancestor_id)
        crumbs.append(Breadcrumb(item_id=ancestor.id, label=ancestor.label, depth=depth))
    return tuple(crumbs)


def get_siblings(
    tree: Tree,
    item_id: str,
    *,
    count: int = 3,
) -> tuple[tuple[TreeItem, ...], tuple[TreeItem, ...]]:
    """Get siblings before and after an item.

    Returns (siblings_before, siblings_after) tuples, nearest last/first.
    """
    parent_id, index = index_of(tree, item_id)
    siblings = children_of(tree, parent_id)
    return siblings[max(0, index - count) : index], siblings[index + 1 : index + 1 + count]


def visible_rows(tree: Tree, *, level: int = 0) -> list[VisibleRow]:
    """Flatten the rows a tree view renders, descending only into open items."""
    rows: list[VisibleRow] = []
    for index, item in enumerate(tree):
        mode = item_mode(item, index, len(tree))
        rows.append(VisibleRow(item=item, level=level, index=index, mode=mode))
        if item.has_children and item.is_open:
            rows.extend(visible_rows(item.children, level=level + 1))
    return rows
