"""Parse tree, instruction and action dicts into domain models.

Wire dicts use the camelCase keys of the tree view (``isOpen``, ``itemId``,
``targetId``, ``currentLevel``, ...).
"""

import json
from pathlib import Path
from typing import Any

from treeshift.config import INDENT_PER_LEVEL
from treeshift.models.action import (
    ACTION_TYPES,
    Action,
    ApplyInstruction,
    ModalAdd,
    ModalEdit,
    ModalMove,
)
from treeshift.models.instruction import (
    INSTRUCTION_TYPES,
    Instruction,
    InstructionBlocked,
    Reparent,
)
from treeshift.models.item import Color, Tree, TreeItem

SAMPLE_TREE_DATA: list[dict[str, Any]] = [
    {"id": "1", "label": "Item 1", "color": "blue", "children": []},
    {
        "id": "2",
        "label": "Item 2",
        "color": "green",
        "isOpen": True,
        "children": [{"id": "2.1", "label": "Item 2.1", "color": "teal", "children": []}],
    },
    {"id": "3", "label": "Item 3", "color": "orange", "children": []},
]


def _parse_color(value: Any) -> Color | None:
    if value is None or value == "":
        return None
    try:
        return Color(value)
    except ValueError:
        msg = f"Unknown color {value!r}, expected one of {[c.value for c in Color]!r}"
        raise ValueError(msg) from None


def parse_item_data(data: dict[str, Any]) -> TreeItem:
    """Parse one item dict (with nested children) into a TreeItem."""
    if not isinstance(data, dict) or "id" not in data:
        msg = f"Item must be an object with an 'id' key, got {data!r}"
        raise ValueError(msg)
    children = tuple(parse_item_data(child) for child in data.get("children", []))
    return TreeItem(
        id=str(data["id"]),
        label=data.get("label", ""),
        color=_parse_color(data.get("color")),
        children=children,
        is_open=bool(data.get("isOpen", False)),
    )


def parse_tree_data(data: list[dict[str, Any]]) -> Tree:
    """Parse a list of top-level item dicts into a Tree.

    Raises:
        ValueError: If an id appears more than once or a color is unknown.
    """
    tree = tuple(parse_item_data(item) for item in data)

    seen: set[str] = set()
    duplicates: set[str] = set()
    todo = list(tree)
    while todo:
        item = todo.pop()
        if item.id in seen:
            duplicates.add(item.id)
        seen.add(item.id)
        todo.extend(item.children)

    if duplicates:
        msg = f"Duplicate item ids: {sorted(duplicates)!r}"
        raise ValueError(msg)
    return tree


def item_to_data(item: TreeItem) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": item.id,
        "label": item.label,
        "children": [item_to_data(child) for child in item.children],
    }
    if item.color is not None:
        data["color"] = item.color.value
    if item.is_open:
        data["isOpen"] = True
    return data


def tree_to_data(tree: Tree) -> list[dict[str, Any]]:
    """Inverse of ``parse_tree_data``."""
    return [item_to_data(item) for item in tree]


def parse_instruction_data(data: dict[str, Any]) -> Instruction:
    """Parse an instruction dict as produced by the hitbox collaborator."""
    kind = data.get("type")
    cls = INSTRUCTION_TYPES.get(kind)  # type: ignore[arg-type]
    if cls is None:
        msg = f"Unknown instruction type {kind!r}"
        raise ValueError(msg)

    if cls is InstructionBlocked:
        return InstructionBlocked(desired=parse_instruction_data(data["desired"]))

    kwargs: dict[str, Any] = {
        "current_level": int(data["currentLevel"]),
        "indent_per_level": int(data.get("indentPerLevel", INDENT_PER_LEVEL)),
    }
    if cls is Reparent:
        kwargs["desired_level"] = int(data["desiredLevel"])
    return cls(**kwargs)  # type: ignore[no-any-return]


def instruction_to_data(instruction: Instruction) -> dict[str, Any]:
    if isinstance(instruction, InstructionBlocked):
        return {"type": instruction.type, "desired": instruction_to_data(instruction.desired)}

    data: dict[str, Any] = {
        "type": instruction.type,
        "currentLevel": instruction.current_level,
        "indentPerLevel": instruction.indent_per_level,
    }
    if isinstance(instruction, Reparent):
        data["desiredLevel"] = instruction.desired_level
    return data


def parse_action_data(data: dict[str, Any]) -> Action:
    """Parse an action dict (``{"type": "modal-move", "itemId": ...}``)."""
    kind = data.get("type")
    cls = ACTION_TYPES.get(kind)  # type: ignore[arg-type]
    if cls is None:
        msg = f"Unknown action type {kind!r}"
        raise ValueError(msg)

    item_id = str(data["itemId"])
    if cls is ApplyInstruction:
        return ApplyInstruction(
            instruction=parse_instruction_data(data["instruction"]),
            item_id=item_id,
            target_id=str(data["targetId"]),
        )
    if cls is ModalMove:
        return ModalMove(item_id=item_id, target_id=str(data["targetId"]), index=int(data["index"]))
    if cls is ModalAdd:
        return ModalAdd(
            item_id=item_id,
            item=parse_item_data(data["item"]),
            target_id=str(data["targetId"]),
            index=int(data["index"]),
        )
    if cls is ModalEdit:
        return ModalEdit(item_id=item_id, item=parse_item_data(data["item"]))
    return cls(item_id=item_id)  # type: ignore[no-any-return]


def load_tree(path: Path) -> Tree:
    """Read a seed tree from a JSON file holding a list of top-level items."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        msg = f"{path}: expected a JSON list of items, got {type(data).__name__}"
        raise ValueError(msg)
    return parse_tree_data(data)


def sample_tree() -> Tree:
    """The built-in demo tree."""
    return parse_tree_data(SAMPLE_TREE_DATA)
