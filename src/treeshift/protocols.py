"""Protocols for the collaborators the tree engine talks to."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class CancelHandle(Protocol):
    """A scheduled callback that can still be called off."""

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        ...


@runtime_checkable
class SchedulerProtocol(Protocol):
    """Protocol for delayed-callback schedulers used during drags."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> CancelHandle:
        """Run ``callback`` once after ``delay`` seconds unless cancelled."""
        ...


@runtime_checkable
class FocusableProtocol(Protocol):
    """Protocol for row surfaces that can take keyboard focus."""

    def focus(self) -> None:
        """Move focus to this element."""
        ...
