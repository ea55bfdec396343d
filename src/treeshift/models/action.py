"""Actions accepted by the tree reducer."""

from dataclasses import dataclass
from typing import ClassVar

from treeshift.models.instruction import Instruction
from treeshift.models.item import Tree, TreeItem


@dataclass(frozen=True)
class Toggle:
    type: ClassVar[str] = "toggle"

    item_id: str


@dataclass(frozen=True)
class Expand:
    type: ClassVar[str] = "expand"

    item_id: str


@dataclass(frozen=True)
class Collapse:
    type: ClassVar[str] = "collapse"

    item_id: str


@dataclass(frozen=True)
class ApplyInstruction:
    """Drag-drop commit of ``item_id`` onto ``target_id``."""

    type: ClassVar[str] = "instruction"

    instruction: Instruction
    item_id: str
    target_id: str


@dataclass(frozen=True)
class ModalMove:
    """Dialog-driven move.

    ``target_id`` is the new parent (root sentinel for top level) and
    ``index`` is measured in the destination's children *before* the item
    is detached.
    """

    type: ClassVar[str] = "modal-move"

    item_id: str
    target_id: str
    index: int


@dataclass(frozen=True)
class ModalAdd:
    type: ClassVar[str] = "modal-add"

    item_id: str
    item: TreeItem
    target_id: str
    index: int


@dataclass(frozen=True)
class ModalEdit:
    """Replace label and color. Any children carried by ``item`` are ignored."""

    type: ClassVar[str] = "modal-edit"

    item_id: str
    item: TreeItem


@dataclass(frozen=True)
class NodeRemove:
    type: ClassVar[str] = "node-remove"

    item_id: str


Action = (
    Toggle | Expand | Collapse | ApplyInstruction | ModalMove | ModalAdd | ModalEdit | NodeRemove
)

ACTION_TYPES: dict[str, type] = {
    cls.type: cls
    for cls in (
        Toggle, Expand, Collapse, ApplyInstruction, ModalMove, ModalAdd, ModalEdit, NodeRemove
    )
}


@dataclass(frozen=True)
class TreeState:
    """Reducer state. Expansion lives on the items themselves."""

    tree: Tree
    last_action: Action | None = None

