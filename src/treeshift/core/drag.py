"""Drag sessions: live instruction feedback, expand-on-hover and the drop commit.

A session never mutates the tree while the pointer moves; only ``drop`` (and
the collapse/expand bookkeeping around it) dispatches structural actions.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from treeshift.config import EXPAND_DELAY_SECONDS
from treeshift.core.interpreter import InstructionInterpreter, parent_of_instruction
from treeshift.core.store import TreeStore
from treeshift.models.action import ApplyInstruction, Collapse, Expand, TreeState
from treeshift.models.instruction import Instruction, MakeChild, Reparent
from treeshift.protocols import CancelHandle, SchedulerProtocol


class AsyncioScheduler:
    """Schedules callbacks on the event loop that drives the UI."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


@dataclass(eq=False)
class ExpandToken:
    """A pending expand of ``item_id``; ``handle`` cancels the underlying timer."""

    item_id: str
    handle: CancelHandle | None = None

    def cancel(self) -> None:
        if self.handle is not None:
            self.handle.cancel()
            self.handle = None


class DragSession:
    """One drag of ``item_id`` within a tree view."""

    def __init__(
        self,
        store: TreeStore,
        item_id: str,
        *,
        scheduler: SchedulerProtocol,
        expand_delay: float = EXPAND_DELAY_SECONDS,
    ) -> None:
        self.store = store
        self.item_id = item_id
        self.is_open_on_drag_start = False
        self.target_id: str | None = None
        self.instruction: Instruction | None = None
        self._scheduler = scheduler
        self._expand_delay = expand_delay
        self._interpreter = InstructionInterpreter()
        self._expand_token: ExpandToken | None = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def pending_expand(self) -> str | None:
        """Id of the item waiting to be expanded, if a token is outstanding."""
        return self._expand_token.item_id if self._expand_token else None

    def start(self) -> None:
        """Begin the drag, collapsing the dragged item while it moves."""
        item = self.store.queries.get_item(self.item_id)
        self.is_open_on_drag_start = item.is_open
        self._active = True
        self.store.track_drag(self)
        logger.debug("Drag of {} started", self.item_id)
        if item.is_open:
            self.store.dispatch(Collapse(item_id=self.item_id))

    def hover(self, target_id: str, instruction: Instruction | None) -> Instruction | None:
        """Record the hitbox result over ``target_id``; return what the row should display."""
        if target_id != self.target_id:
            self._cancel_expand()
        self.target_id = target_id
        self.instruction = instruction

        if instruction is None:
            self._cancel_expand()
            return None

        if target_id == self.item_id:
            self._cancel_expand()
            if isinstance(instruction, Reparent):
                return self._interpret(target_id, instruction)
            return None

        if isinstance(instruction, MakeChild):
            target = self.store.queries.get_item(target_id)
            if target.has_children and not target.is_open and self._expand_token is None:
                self._schedule_expand(target_id)
        else:
            self._cancel_expand()
        return self._interpret(target_id, instruction)

    def leave(self) -> None:
        """The pointer left every drop target."""
        self._cancel_expand()
        self.target_id = None
        self.instruction = None

    def drop(self) -> TreeState:
        """Commit the current hover, if any, and end the drag."""
        self._cancel_expand()
        try:
            if self._active and self.target_id is not None and self.instruction is not None:
                self.store.dispatch(
                    ApplyInstruction(
                        instruction=self.instruction,
                        item_id=self.item_id,
                        target_id=self.target_id,
                    )
                )
        finally:
            self._finish()
        return self.store.state

    def close(self) -> None:
        """Abandon the drag without committing (view unmounted or drag cancelled)."""
        self._cancel_expand()
        self._finish()

    def highlighted_parent_id(self) -> str | None:
        """Row to highlight as the parent the current instruction drops into."""
        if self.target_id is None or self.instruction is None:
            return None
        path = self.store.get_path_to_item(self.target_id)
        return parent_of_instruction(path, self.instruction)

    def _interpret(self, target_id: str, instruction: Instruction) -> Instruction:
        return self._interpreter(self.store.tree, self.item_id, target_id, instruction)

    def _schedule_expand(self, target_id: str) -> None:
        token = ExpandToken(item_id=target_id)

        def fire() -> None:
            if self._expand_token is not token:
                return
            self._expand_token = None
            if target_id not in self.store.queries:
                return
            logger.debug("Expanding {} after hover", target_id)
            self.store.dispatch(Expand(item_id=target_id))

        token.handle = self._scheduler.call_later(self._expand_delay, fire)
        self._expand_token = token

    def _cancel_expand(self) -> None:
        if self._expand_token is not None:
            self._expand_token.cancel()
            self._expand_token = None

    def _finish(self) -> None:
        if not self._active:
            return
        self._active = False
        self.target_id = None
        self.instruction = None
        self.store.untrack_drag(self)
        # The item may have been removed while it was being dragged.
        if self.is_open_on_drag_start and self.item_id in self.store.queries:
            self.store.dispatch(Expand(item_id=self.item_id))
        logger.debug("Drag of {} finished", self.item_id)
