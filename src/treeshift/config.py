"""Configuration constants for treeshift."""

import os
from pathlib import Path

# Root sentinel: the conceptual parent of top-level items.
ROOT_ID: str = ""

# Dialog value standing in for the root sentinel in parent pickers.
NO_PARENT: str = "NONE"

# Horizontal indent per nesting level, in pixels. The hitbox collaborator uses
# it to derive reparent levels from the pointer's x offset.
INDENT_PER_LEVEL: int = 32

# How long a make-child hover must persist over a closed container before it
# is expanded.
EXPAND_DELAY_SECONDS: float = 0.5

# Environment variable naming a JSON file with the seed tree.
TREE_FILE_ENV: str = "TREESHIFT_TREE_FILE"


def resolve_tree_file() -> Path | None:
    """Return the seed tree file from the environment, if one is configured."""
    value = os.environ.get(TREE_FILE_ENV)
    if not value:
        return None
    return Path(value).expanduser()
