"""Domain models for the item tree."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Color(StrEnum):
    """Fixed palette of row indicator colors."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    PINK = "pink"
    INDIGO = "indigo"
    TEAL = "teal"
    ORANGE = "orange"
    CYAN = "cyan"
    LIME = "lime"
    GRAY = "gray"


class ItemMode(StrEnum):
    """Row hint handed to the hitbox collaborator."""

    STANDARD = "standard"
    EXPANDED = "expanded"
    LAST_IN_GROUP = "last-in-group"


@dataclass(frozen=True)
class TreeItem:
    """A single node in the tree.

    ``children`` order is the sibling display order. ``is_open`` is the
    UI expansion flag and only matters for items with children.
    """

    id: str
    label: str
    color: Color | None = None
    children: tuple["TreeItem", ...] = ()
    is_open: bool = False

    @property
    def has_children(self) -> bool:
        return bool(self.children)


# The forest root: ordered top-level items.
Tree = tuple[TreeItem, ...]


@dataclass(frozen=True)
class MoveTarget:
    """A legal new parent for an item, as offered by move pickers."""

    id: str
    label: str
    level: int


@dataclass(frozen=True)
class Breadcrumb:
    """A single ancestor in a breadcrumb trail."""

    item_id: str
    label: str
    depth: int


@dataclass(frozen=True)
class VisibleRow:
    """One rendered row of the tree view."""

    item: TreeItem
    level: int
    index: int
    mode: ItemMode


@dataclass(frozen=True)
class RegisteredItem:
    """Interactive surfaces of a mounted row."""

    item_id: str
    element: Any
    action_menu_trigger: Any
