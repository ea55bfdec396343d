"""Derived queries over one tree snapshot, and the row registry.

``TreeQueries`` indexes a single tree value once; ``TreeStore`` builds a new
one whenever the tree identity changes, so answers are never stale.
"""

from collections.abc import Callable

from loguru import logger

from treeshift.config import ROOT_ID
from treeshift.core.tree.model import iter_items
from treeshift.errors import ItemNotFoundError
from treeshift.models.item import Breadcrumb, MoveTarget, RegisteredItem, Tree, TreeItem

NO_PARENT_LABEL = "No parent"


class TreeQueries:
    """Read-only lookups over a single tree value."""

    def __init__(self, tree: Tree) -> None:
        self.tree = tree
        self._items: dict[str, TreeItem] = {}
        self._paths: dict[str, tuple[str, ...]] = {}
        self._children: dict[str, Tree] = {ROOT_ID: tree}
        self._index(tree, ())

    def _index(self, items: Tree, path: tuple[str, ...]) -> None:
        for item in items:
            self._items[item.id] = item
            self._paths[item.id] = path
            self._children[item.id] = item.children
            self._index(item.children, (*path, item.id))

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def get_item(self, item_id: str) -> TreeItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFoundError(item_id) from None

    def get_path_to_item(self, item_id: str) -> tuple[str, ...]:
        """Ancestor ids from the forest root down to (excluding) ``item_id``."""
        try:
            return self._paths[item_id]
        except KeyError:
            raise ItemNotFoundError(item_id) from None

    def get_parent_id(self, item_id: str) -> str:
        path = self.get_path_to_item(item_id)
        return path[-1] if path else ROOT_ID

    def get_children_of_item(self, parent_id: str) -> Tree:
        """Direct children of ``parent_id``; the top level for the root sentinel."""
        try:
            return self._children[parent_id]
        except KeyError:
            raise ItemNotFoundError(parent_id) from None

    def get_move_targets(self, item_id: str) -> list[MoveTarget]:
        """Every legal new parent for ``item_id``, root sentinel first.

        Excludes the item itself and its whole subtree. ``item_id`` need not be
        in the tree yet (add dialogs ask for targets of a fresh id).
        """
        targets = [MoveTarget(id=ROOT_ID, label=NO_PARENT_LABEL, level=-1)]
        skip_below: int | None = None
        for item, level in iter_items(self.tree):
            if skip_below is not None:
                if level > skip_below:
                    continue
                skip_below = None
            if item.id == item_id:
                skip_below = level
                continue
            targets.append(MoveTarget(id=item.id, label=item.label, level=level))
        return targets

    def get_breadcrumbs(self, item_id: str) -> tuple[Breadcrumb, ...]:
        return tuple(
            Breadcrumb(item_id=ancestor_id, label=self._items[ancestor_id].label, depth=depth)
            for depth, ancestor_id in enumerate(self.get_path_to_item(item_id))
        )


class TreeItemRegistry:
    """Interactive surfaces of mounted rows, keyed by item id.

    Owned by one tree view: created on mount, cleared on unmount.
    """

    def __init__(self) -> None:
        self._entries: dict[str, RegisteredItem] = {}

    def register(
        self,
        *,
        item_id: str,
        element: object,
        action_menu_trigger: object,
    ) -> Callable[[], None]:
        """Register a row; returns a disposer that unregisters it.

        A disposer only removes the registration it created, so a row that
        re-registered in the meantime keeps its newer entry.
        """
        entry = RegisteredItem(
            item_id=item_id, element=element, action_menu_trigger=action_menu_trigger
        )
        self._entries[item_id] = entry

        def dispose() -> None:
            if self._entries.get(item_id) is entry:
                del self._entries[item_id]

        return dispose

    def get(self, item_id: str) -> RegisteredItem | None:
        return self._entries.get(item_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        if self._entries:
            logger.debug("Clearing {} registered rows", len(self._entries))
        self._entries.clear()
