"""Helpers behind the add, edit and move dialogs.

Dialogs collect a label, a color, a parent and a 1-based position. These
helpers build their option lists from the query facade, validate input
before anything reaches the reducer, and translate positions into the
reducer's index contract.
"""

import uuid
from dataclasses import dataclass

from treeshift.config import NO_PARENT, ROOT_ID
from treeshift.core.queries import TreeQueries
from treeshift.errors import FormValidationError
from treeshift.models.action import ModalAdd, ModalEdit, ModalMove
from treeshift.models.item import Color, TreeItem


@dataclass(frozen=True)
class Option:
    """One choice in a dialog select."""

    label: str
    value: str


def parent_value_to_id(value: str) -> str:
    """Map a picker value to a parent id (``NONE`` is the root)."""
    return ROOT_ID if value in (NO_PARENT, ROOT_ID) else value


def parent_options(queries: TreeQueries, item_id: str) -> list[Option]:
    """The root option followed by every legal new parent for ``item_id``."""
    return [
        Option(label=target.label, value=target.id or NO_PARENT)
        for target in queries.get_move_targets(item_id)
    ]


def default_parent(queries: TreeQueries, item_id: str) -> Option:
    """The option for ``item_id``'s current parent."""
    parent_id = queries.get_parent_id(item_id) or NO_PARENT
    option = next((o for o in parent_options(queries, item_id) if o.value == parent_id), None)
    if option is None:
        msg = f"Current parent of {item_id!r} is not a move target"
        raise LookupError(msg)
    return option


def position_options(queries: TreeQueries, parent_id: str, item_id: str) -> list[int]:
    """1-based positions available under ``parent_id`` once ``item_id`` is taken out."""
    siblings = [
        child
        for child in queries.get_children_of_item(parent_value_to_id(parent_id))
        if child.id != item_id
    ]
    return list(range(1, len(siblings) + 2))


def validate_label(label: str) -> str:
    label = label.strip()
    if not label:
        raise FormValidationError("label", "must not be empty")
    return label


def validate_color(color: str | Color | None) -> Color | None:
    if color is None or color == "":
        return None
    try:
        return Color(color)
    except ValueError:
        raise FormValidationError(
            "color", f"must be one of {', '.join(c.value for c in Color)}"
        ) from None


def _validate_position(position: int, choices: list[int]) -> int:
    if position not in choices:
        raise FormValidationError("position", f"must be between 1 and {choices[-1]}")
    return position


def build_move_action(
    queries: TreeQueries, item_id: str, *, parent: str, position: int
) -> ModalMove:
    """Build the move for a submitted move dialog.

    ``position`` counts the destination's children without the moved item.
    When the item stays under the same parent at or past its current slot,
    the index is bumped so the reducer's same-parent shift lands it there.
    """
    parent_id = parent_value_to_id(parent)
    if parent_id not in {target.id for target in queries.get_move_targets(item_id)}:
        raise FormValidationError("parent", f"{parent!r} is not a valid parent")
    _validate_position(position, position_options(queries, parent_id, item_id))

    index = position - 1
    if queries.get_parent_id(item_id) == parent_id:
        siblings = queries.get_children_of_item(parent_id)
        current = next(i for i, sibling in enumerate(siblings) if sibling.id == item_id)
        if index >= current:
            index += 1
    return ModalMove(item_id=item_id, target_id=parent_id, index=index)


def build_add_action(
    queries: TreeQueries,
    *,
    label: str,
    parent: str = NO_PARENT,
    position: int = 1,
    color: str | Color | None = None,
    item_id: str | None = None,
) -> ModalAdd:
    """Build the insert for a submitted add dialog. New ids default to a UUID4."""
    new_id = item_id or str(uuid.uuid4())
    item = TreeItem(id=new_id, label=validate_label(label), color=validate_color(color))
    parent_id = parent_value_to_id(parent)
    if parent_id != ROOT_ID and parent_id not in queries:
        raise FormValidationError("parent", f"{parent!r} is not a valid parent")
    _validate_position(position, position_options(queries, parent_id, new_id))
    return ModalAdd(item_id=new_id, item=item, target_id=parent_id, index=position - 1)


def build_edit_action(
    queries: TreeQueries,
    item_id: str,
    *,
    label: str,
    color: str | Color | None = None,
) -> ModalEdit:
    """Build the edit for a submitted edit dialog.

    ``color=None`` keeps the current color; an empty string clears it.
    """
    current = queries.get_item(item_id)
    new_color = current.color if color is None else validate_color(color)
    edited = TreeItem(id=item_id, label=validate_label(label), color=new_color)
    return ModalEdit(item_id=current.id, item=edited)
