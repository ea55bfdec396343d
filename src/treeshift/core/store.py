"""State container for one tree view."""

from collections import deque
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING

from loguru import logger

from treeshift.core.queries import TreeItemRegistry, TreeQueries
from treeshift.core.reducer import initial_state, reduce
from treeshift.models.action import Action, ModalMove, TreeState
from treeshift.models.item import MoveTarget, Tree
from treeshift.protocols import FocusableProtocol

if TYPE_CHECKING:
    from treeshift.core.drag import DragSession

Listener = Callable[[TreeState], None]


class TreeStore:
    """Single owner of the tree state.

    Actions are applied strictly in dispatch order. A listener that dispatches
    while being notified has its action queued behind the current one.
    """

    def __init__(self, tree: Tree) -> None:
        self._state = initial_state(tree)
        self._queries: TreeQueries | None = None
        self._listeners: list[Listener] = []
        self._pending: deque[Action] = deque()
        self._dispatching = False
        self._drags: set["DragSession"] = set()
        self.registry = TreeItemRegistry()

    @property
    def state(self) -> TreeState:
        return self._state

    @property
    def tree(self) -> Tree:
        return self._state.tree

    @property
    def queries(self) -> TreeQueries:
        """Facade over the current tree, rebuilt when the tree value changes."""
        if self._queries is None or self._queries.tree is not self._state.tree:
            self._queries = TreeQueries(self._state.tree)
        return self._queries

    def dispatch(self, action: Action) -> TreeState:
        """Apply ``action`` (after any already queued) and return the resulting state."""
        self._pending.append(action)
        if self._dispatching:
            return self._state

        self._dispatching = True
        try:
            while self._pending:
                self._apply(self._pending.popleft())
        finally:
            self._dispatching = False
            self._pending.clear()
        return self._state

    def _apply(self, action: Action) -> None:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is previous:
            logger.debug("{} on {} left the tree unchanged", action.type, action.item_id)
            return

        if isinstance(action, ModalMove):
            self._focus_moved_item(action.item_id)
        for listener in list(self._listeners):
            listener(self._state)

    def _focus_moved_item(self, item_id: str) -> None:
        entry = self.registry.get(item_id)
        if entry is not None and isinstance(entry.action_menu_trigger, FocusableProtocol):
            entry.action_menu_trigger.focus()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every applied action; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Facade shortcuts used by rows and dialogs.

    def get_path_to_item(self, item_id: str) -> tuple[str, ...]:
        return self.queries.get_path_to_item(item_id)

    def get_children_of_item(self, parent_id: str) -> Tree:
        return self.queries.get_children_of_item(parent_id)

    def get_move_targets(self, item_id: str) -> list[MoveTarget]:
        return self.queries.get_move_targets(item_id)

    def register_tree_item(
        self, *, item_id: str, element: object, action_menu_trigger: object
    ) -> Callable[[], None]:
        return self.registry.register(
            item_id=item_id, element=element, action_menu_trigger=action_menu_trigger
        )

    def track_drag(self, session: "DragSession") -> None:
        self._drags.add(session)

    def untrack_drag(self, session: "DragSession") -> None:
        self._drags.discard(session)

    def close(self) -> None:
        """Tear down the view: abandon open drags and clear the registry."""
        try:
            for session in list(self._drags):
                session.close()
        finally:
            self._drags.clear()
            self.registry.clear()
            self._listeners.clear()

    def __enter__(self) -> "TreeStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
