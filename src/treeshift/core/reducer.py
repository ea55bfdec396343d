"""Tree reducer: (state, action) -> state.

Pure and total. Every transition is computed in full before it is returned,
so an action either applies completely or leaves the state untouched. A
no-op returns the very same state object.

Lookup failures for ids the caller should have managed correctly raise
``ItemNotFoundError`` instead of degrading silently.
"""

from collections.abc import Callable

from loguru import logger

from treeshift.config import ROOT_ID
from treeshift.core.interpreter import resolve_instruction
from treeshift.core.tree.model import (
    children_of,
    collect_ids,
    contains,
    delete_by_id,
    find_item,
    index_of,
    insert_at,
    is_descendant,
    move_item,
    set_open,
    update_by_id,
)
from treeshift.errors import ItemNotFoundError
from treeshift.models.action import (
    Action,
    ApplyInstruction,
    Collapse,
    Expand,
    ModalAdd,
    ModalEdit,
    ModalMove,
    NodeRemove,
    Toggle,
    TreeState,
)
from treeshift.models.instruction import InstructionBlocked
from treeshift.models.item import Tree, TreeItem


def initial_state(tree: Tree) -> TreeState:
    """The starting state for a freshly mounted tree view."""
    return TreeState(tree=tree)


def reduce(state: TreeState, action: Action) -> TreeState:
    """Apply one action and return the next state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        msg = f"Unknown action: {action!r}"
        raise TypeError(msg)

    new_tree = handler(state.tree, action)
    if new_tree is None:
        return state
    return TreeState(tree=new_tree, last_action=action)


def _require(tree: Tree, item_id: str) -> TreeItem:
    item = find_item(tree, item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item


def _toggle(tree: Tree, action: Toggle) -> Tree | None:
    item = _require(tree, action.item_id)
    if not item.has_children and not item.is_open:
        return None
    return set_open(tree, item.id, not item.is_open)


def _expand(tree: Tree, action: Expand) -> Tree | None:
    item = _require(tree, action.item_id)
    if item.is_open or not item.has_children:
        return None
    return set_open(tree, action.item_id, True)


def _collapse(tree: Tree, action: Collapse) -> Tree | None:
    if not _require(tree, action.item_id).is_open:
        return None
    return set_open(tree, action.item_id, False)


def _apply_instruction(tree: Tree, action: ApplyInstruction) -> Tree | None:
    destination = resolve_instruction(tree, action.item_id, action.target_id, action.instruction)
    if isinstance(destination, InstructionBlocked):
        logger.debug(
            "Ignoring blocked {} of {} onto {}",
            destination.desired.type,
            action.item_id,
            action.target_id,
        )
        return None

    logger.info(
        "Moving {} under {!r} at {}", action.item_id, destination.parent_id, destination.index
    )
    return move_item(tree, action.item_id, destination.parent_id, destination.index)


def _modal_move(tree: Tree, action: ModalMove) -> Tree | None:
    _require(tree, action.item_id)
    if action.target_id != ROOT_ID:
        _require(tree, action.target_id)
        if action.target_id == action.item_id or is_descendant(
            tree, action.item_id, action.target_id
        ):
            logger.debug("Ignoring move of {} into its own subtree", action.item_id)
            return None

    logger.info("Moving {} under {!r} at {}", action.item_id, action.target_id, action.index)
    return move_item(tree, action.item_id, action.target_id, action.index)


def _modal_add(tree: Tree, action: ModalAdd) -> Tree | None:
    if action.item.id != action.item_id:
        msg = f"Item id {action.item.id!r} does not match action id {action.item_id!r}"
        raise ValueError(msg)

    if contains(tree, action.item_id) or collect_ids(action.item.children) & collect_ids(tree):
        logger.debug("Ignoring add of existing id {}", action.item_id)
        return None

    # Raises for an unknown parent before anything is built.
    children_of(tree, action.target_id)
    logger.info("Adding {} under {!r} at {}", action.item_id, action.target_id, action.index)
    return insert_at(tree, action.target_id, action.index, action.item)


def _modal_edit(tree: Tree, action: ModalEdit) -> Tree | None:
    return update_by_id(tree, action.item_id, label=action.item.label, color=action.item.color)


def _node_remove(tree: Tree, action: NodeRemove) -> Tree | None:
    logger.info("Removing {} and its subtree", action.item_id)
    return delete_by_id(tree, action.item_id)


_HANDLERS: dict[type, Callable[[Tree, Action], Tree | None]] = {
    Toggle: _toggle,
    Expand: _expand,
    Collapse: _collapse,
    ApplyInstruction: _apply_instruction,
    ModalMove: _modal_move,
    ModalAdd: _modal_add,
    ModalEdit: _modal_edit,
    NodeRemove: _node_remove,
}


def describe_action(state: TreeState) -> str | None:
    """Live-region announcement for the last applied move, if any."""
    action = state.last_action
    if not isinstance(action, ModalMove | ApplyInstruction):
        return None

    parent_id, index = index_of(state.tree, action.item_id)
    parent = "the root" if parent_id == ROOT_ID else f"Item {parent_id}"
    return f"You've moved Item {action.item_id} to position {index + 1} in {parent}."
