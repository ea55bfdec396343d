"""Resolve drop instructions into concrete tree destinations.

Runs on every pointer-move frame during a drag, so everything here is pure
and never touches the committed tree.
"""

from dataclasses import dataclass

from loguru import logger

from treeshift.config import ROOT_ID
from treeshift.core.tree.model import children_of, is_descendant, require_path
from treeshift.errors import InvalidInstructionError
from treeshift.models.instruction import (
    Instruction,
    InstructionBlocked,
    MakeChild,
    Reparent,
    ReorderAbove,
    ReorderBelow,
)
from treeshift.models.item import Tree


@dataclass(frozen=True)
class Destination:
    """Where a dragged item lands.

    ``index`` is measured in ``parent_id``'s children before the dragged item
    is detached; ``move_item`` applies the same-parent shift.
    """

    parent_id: str
    index: int


def _sibling_index(tree: Tree, parent_id: str, item_id: str) -> int:
    siblings = children_of(tree, parent_id)
    return next(i for i, sibling in enumerate(siblings) if sibling.id == item_id)


def _destination(tree: Tree, target_id: str, instruction: Instruction) -> Destination:
    target_path = require_path(tree, target_id)

    if isinstance(instruction, ReorderAbove | ReorderBelow):
        parent_id = target_path[-1] if target_path else ROOT_ID
        index = _sibling_index(tree, parent_id, target_id)
        if isinstance(instruction, ReorderBelow):
            index += 1
        return Destination(parent_id, index)

    if isinstance(instruction, MakeChild):
        return Destination(target_id, 0)

    if isinstance(instruction, Reparent):
        level = instruction.desired_level
        if not 0 <= level < len(target_path):
            msg = (
                f"Cannot reparent to level {level} from {target_id!r} "
                f"at level {len(target_path)}"
            )
            raise InvalidInstructionError(msg)
        ancestor_id = target_path[level]
        parent_id = target_path[level - 1] if level > 0 else ROOT_ID
        return Destination(parent_id, _sibling_index(tree, parent_id, ancestor_id) + 1)

    msg = f"Unsupported instruction: {instruction!r}"
    raise InvalidInstructionError(msg)


def resolve_instruction(
    tree: Tree,
    item_id: str,
    target_id: str,
    instruction: Instruction,
) -> Destination | InstructionBlocked:
    """Turn an instruction over ``target_id`` into a destination for ``item_id``.

    Returns ``InstructionBlocked`` when the drop would drop an item onto itself
    or nest it inside its own subtree. Already-blocked instructions stay blocked.
    """
    if isinstance(instruction, InstructionBlocked):
        return instruction

    require_path(tree, item_id)
    if item_id == target_id or is_descendant(tree, item_id, target_id):
        return InstructionBlocked(desired=instruction)

    destination = _destination(tree, target_id, instruction)
    if destination.parent_id == item_id or is_descendant(tree, item_id, destination.parent_id):
        return InstructionBlocked(desired=instruction)
    return destination


def interpret(tree: Tree, item_id: str, target_id: str, instruction: Instruction) -> Instruction:
    """Return the instruction to display: as-is when legal, wrapped when blocked."""
    resolved = resolve_instruction(tree, item_id, target_id, instruction)
    if isinstance(resolved, InstructionBlocked):
        return resolved
    return instruction


def parent_level_of_instruction(instruction: Instruction) -> int:
    """Level of the row that will become the dropped item's parent (-1 = root)."""
    if isinstance(instruction, InstructionBlocked):
        return parent_level_of_instruction(instruction.desired)
    if isinstance(instruction, Reparent):
        return instruction.desired_level - 1
    return instruction.current_level - 1


def parent_of_instruction(target_path: tuple[str, ...], instruction: Instruction) -> str | None:
    """Id of the row to highlight as the instruction's parent, if any.

    ``target_path`` is the ancestor path of the hovered row.
    """
    level = parent_level_of_instruction(instruction)
    if 0 <= level < len(target_path):
        return target_path[level]
    return None


class InstructionInterpreter:
    """Memoized ``interpret`` for one drag.

    Results are keyed on the tree's identity plus the drag inputs; a new tree
    value drops the whole cache.
    """

    def __init__(self) -> None:
        self._tree: Tree | None = None
        self._cache: dict[tuple[str, str, Instruction], Instruction] = {}

    def __call__(
        self, tree: Tree, item_id: str, target_id: str, instruction: Instruction
    ) -> Instruction:
        if tree is not self._tree:
            self._tree = tree
            self._cache.clear()

        key = (item_id, target_id, instruction)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = interpret(tree, item_id, target_id, instruction)
        if isinstance(result, InstructionBlocked) and result.desired is instruction:
            logger.debug("Blocked {} of {} onto {}", instruction.type, item_id, target_id)
        self._cache[key] = result
        return result

    def __len__(self) -> int:
        return len(self._cache)
