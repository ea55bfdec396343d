"""Drag-and-drop tree reorganization engine."""

from treeshift.core.drag import AsyncioScheduler, DragSession
from treeshift.core.interpreter import InstructionInterpreter, interpret, resolve_instruction
from treeshift.core.queries import TreeItemRegistry, TreeQueries
from treeshift.core.reducer import initial_state, reduce
from treeshift.core.store import TreeStore
from treeshift.models.item import Color, Tree, TreeItem

__all__ = [
    "AsyncioScheduler",
    "Color",
    "DragSession",
    "InstructionInterpreter",
    "Tree",
    "TreeItem",
    "TreeItemRegistry",
    "TreeQueries",
    "TreeStore",
    "initial_state",
    "interpret",
    "reduce",
    "resolve_instruction",
]
