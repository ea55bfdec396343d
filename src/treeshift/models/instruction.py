"""Drop instructions derived from a drag gesture over a row.

The hitbox collaborator computes one of these per pointer frame. Levels are
0-based nesting depths.
"""

from dataclasses import dataclass
from typing import ClassVar

from treeshift.config import INDENT_PER_LEVEL


@dataclass(frozen=True)
class ReorderAbove:
    """Place the dragged item directly above the target, at its level."""

    type: ClassVar[str] = "reorder-above"

    current_level: int
    indent_per_level: int = INDENT_PER_LEVEL


@dataclass(frozen=True)
class ReorderBelow:
    """Place the dragged item directly below the target, at its level."""

    type: ClassVar[str] = "reorder-below"

    current_level: int
    indent_per_level: int = INDENT_PER_LEVEL


@dataclass(frozen=True)
class MakeChild:
    """Nest the dragged item as the first child of the target."""

    type: ClassVar[str] = "make-child"

    current_level: int
    indent_per_level: int = INDENT_PER_LEVEL


@dataclass(frozen=True)
class Reparent:
    """Move the dragged item out to ``desired_level``, after the target's ancestor there."""

    type: ClassVar[str] = "reparent"

    current_level: int
    desired_level: int
    indent_per_level: int = INDENT_PER_LEVEL


@dataclass(frozen=True)
class InstructionBlocked:
    """An instruction that cannot be honored, kept so the UI can show intent."""

    type: ClassVar[str] = "instruction-blocked"

    desired: "Instruction"


Instruction = ReorderAbove | ReorderBelow | MakeChild | Reparent | InstructionBlocked

INSTRUCTION_TYPES: dict[str, type] = {
    cls.type: cls for cls in (ReorderAbove, ReorderBelow, MakeChild, Reparent, InstructionBlocked)
}
