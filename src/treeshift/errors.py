"""Exceptions raised by treeshift."""


class ItemNotFoundError(LookupError):
    """An id that must exist in the tree does not.

    Ids are managed by the caller, so this is a contract violation rather
    than a recoverable condition.
    """

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item {item_id!r} not found in tree")
        self.item_id = item_id


class InvalidInstructionError(ValueError):
    """A drop instruction is malformed for the target it was computed against."""


class FormValidationError(ValueError):
    """User input collected by a dialog is invalid."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
