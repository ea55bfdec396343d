"""Pure query and mutation functions over an immutable tree.

Every mutation returns a new tree; untouched subtrees are shared with the
input, so unchanged branches keep their identity.
"""

from collections.abc import Callable, Iterator
from dataclasses import replace

from treeshift.config import ROOT_ID
from treeshift.errors import ItemNotFoundError
from treeshift.models.item import Color, ItemMode, Tree, TreeItem


def iter_items(tree: Tree, *, level: int = 0) -> Iterator[tuple[TreeItem, int]]:
    """Yield ``(item, level)`` pairs in pre-order (display order)."""
    for item in tree:
        yield item, level
        yield from iter_items(item.children, level=level + 1)


def collect_ids(tree: Tree) -> set[str]:
    """Return every id in the forest."""
    return {item.id for item, _level in iter_items(tree)}


def find_item(tree: Tree, item_id: str) -> TreeItem | None:
    """Return the item with ``item_id``, or None if absent."""
    for item in tree:
        if item.id == item_id:
            return item
        found = find_item(item.children, item_id)
        if found is not None:
            return found
    return None


def contains(tree: Tree, item_id: str) -> bool:
    return find_item(tree, item_id) is not None


def path_to(tree: Tree, item_id: str) -> tuple[str, ...] | None:
    """Return ancestor ids from the forest root down to (excluding) ``item_id``.

    Returns None when the item is not in the tree.
    """
    for item in tree:
        if item.id == item_id:
            return ()
        sub_path = path_to(item.children, item_id)
        if sub_path is not None:
            return (item.id, *sub_path)
    return None


def require_path(tree: Tree, item_id: str) -> tuple[str, ...]:
    """Like ``path_to`` but raises ``ItemNotFoundError`` for unknown ids."""
    path = path_to(tree, item_id)
    if path is None:
        raise ItemNotFoundError(item_id)
    return path


def parent_of(tree: Tree, item_id: str) -> str:
    """Return the parent id of ``item_id`` (``ROOT_ID`` for top-level items)."""
    path = require_path(tree, item_id)
    return path[-1] if path else ROOT_ID


def children_of(tree: Tree, parent_id: str) -> Tree:
    """Return the direct children of ``parent_id``, or the forest roots for ``ROOT_ID``."""
    if parent_id == ROOT_ID:
        return tree
    parent = find_item(tree, parent_id)
    if parent is None:
        raise ItemNotFoundError(parent_id)
    return parent.children


def index_of(tree: Tree, item_id: str) -> tuple[str, int]:
    """Return ``(parent_id, index)`` of ``item_id`` among its siblings."""
    parent_id = parent_of(tree, item_id)
    siblings = children_of(tree, parent_id)
    index = next(i for i, sibling in enumerate(siblings) if sibling.id == item_id)
    return parent_id, index


def is_descendant(tree: Tree, ancestor_id: str, candidate_id: str) -> bool:
    """Return True if ``candidate_id`` lies strictly inside ``ancestor_id``'s subtree.

    A node is never its own descendant. Unknown ids yield False.
    """
    if ancestor_id == candidate_id:
        return False
    ancestor = find_item(tree, ancestor_id)
    if ancestor is None:
        return False
    return find_item(ancestor.children, candidate_id) is not None


def _map_item(tree: Tree, item_id: str, fn: Callable[[TreeItem], TreeItem]) -> Tree | None:
    """Rebuild the path to ``item_id`` with ``fn`` applied to it; None if absent."""
    for i, item in enumerate(tree):
        if item.id == item_id:
            return (*tree[:i], fn(item), *tree[i + 1 :])
        new_children = _map_item(item.children, item_id, fn)
        if new_children is not None:
            return (*tree[:i], replace(item, children=new_children), *tree[i + 1 :])
    return None


def _update(tree: Tree, item_id: str, fn: Callable[[TreeItem], TreeItem]) -> Tree:
    result = _map_item(tree, item_id, fn)
    if result is None:
        raise ItemNotFoundError(item_id)
    return result


def insert_at(tree: Tree, parent_id: str, index: int, item: TreeItem) -> Tree:
    """Insert ``item`` into ``parent_id``'s children at ``index``.

    The index is clamped to ``[0, len(children)]``. ``ROOT_ID`` inserts into
    the top-level sequence.
    """

    def _insert(siblings: Tree) -> Tree:
        at = max(0, min(index, len(siblings)))
        return (*siblings[:at], item, *siblings[at:])

    if parent_id == ROOT_ID:
        return _insert(tree)
    return _update(
        tree, parent_id, lambda parent: replace(parent, children=_insert(parent.children))
    )


def _remove(tree: Tree, item_id: str) -> tuple[Tree, TreeItem] | None:
    for i, item in enumerate(tree):
        if item.id == item_id:
            return (*tree[:i], *tree[i + 1 :]), item
        removed = _remove(item.children, item_id)
        if removed is not None:
            new_children, found = removed
            return (*tree[:i], replace(item, children=new_children), *tree[i + 1 :]), found
    return None


def remove_by_id(tree: Tree, item_id: str) -> tuple[Tree, TreeItem]:
    """Detach the subtree at ``item_id``; return the new tree and the subtree."""
    removed = _remove(tree, item_id)
    if removed is None:
        raise ItemNotFoundError(item_id)
    return removed


def delete_by_id(tree: Tree, item_id: str) -> Tree:
    """Remove ``item_id`` together with all its descendants."""
    new_tree, _removed = remove_by_id(tree, item_id)
    return new_tree


def update_by_id(tree: Tree, item_id: str, *, label: str, color: Color | None) -> Tree:
    """Replace the label and color of ``item_id``; structure is untouched."""
    return _update(tree, item_id, lambda item: replace(item, label=label, color=color))


def set_open(tree: Tree, item_id: str, is_open: bool) -> Tree:
    """Set the expansion flag of ``item_id``."""
    return _update(tree, item_id, lambda item: replace(item, is_open=is_open))


def move_item(tree: Tree, item_id: str, parent_id: str, index: int) -> Tree:
    """Move ``item_id`` under ``parent_id`` at ``index``.

    ``index`` is measured before detachment. When the item currently sits
    earlier in the same parent, the index shifts down by one once it is
    removed.
    """
    old_parent_id, old_index = index_of(tree, item_id)
    detached, item = remove_by_id(tree, item_id)
    if old_parent_id == parent_id and old_index < index:
        index -= 1
    return insert_at(detached, parent_id, index, item)


def item_mode(item: TreeItem, index: int, sibling_count: int) -> ItemMode:
    """Classify a row for the hitbox collaborator."""
    if item.has_children and item.is_open:
        return ItemMode.EXPANDED
    if index == sibling_count - 1:
        return ItemMode.LAST_IN_GROUP
    return ItemMode.STANDARD
