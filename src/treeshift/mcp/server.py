"""MCP server exposing an in-memory item tree for reading and reorganizing."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from treeshift.config import NO_PARENT, ROOT_ID, resolve_tree_file
from treeshift.core.forms import (
    build_add_action,
    build_edit_action,
    build_move_action,
    default_parent,
    position_options,
)
from treeshift.core.importer.json_reader import (
    instruction_to_data,
    load_tree,
    parse_instruction_data,
    sample_tree,
    tree_to_data,
)
from treeshift.core.interpreter import parent_of_instruction, resolve_instruction
from treeshift.core.reducer import describe_action
from treeshift.core.store import TreeStore
from treeshift.core.tree.markdown import render_tree_as_markdown
from treeshift.core.tree.model import iter_items
from treeshift.core.tree.navigation import get_siblings
from treeshift.errors import ItemNotFoundError
from treeshift.models.action import Action, ApplyInstruction, NodeRemove, Toggle
from treeshift.models.instruction import InstructionBlocked
from treeshift.models.item import Tree, TreeItem

# Errors a caller can cause with bad arguments (unknown ids, malformed dicts,
# invalid form input); anything else is a bug.
_CALLER_ERRORS = (LookupError, ValueError)


def _item_summary(item: TreeItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "label": item.label,
        "color": item.color.value if item.color else None,
        "child_count": len(item.children),
        "is_open": item.is_open,
    }


def _commit(store: TreeStore, action: Action) -> dict[str, Any]:
    """Dispatch ``action`` and report whether it changed the tree."""
    before = store.state
    after = store.dispatch(action)
    if after is before:
        return {"success": False, "error": f"{action.type} on {action.item_id!r} was rejected."}

    result: dict[str, Any] = {"success": True, "item_id": action.item_id}
    announcement = describe_action(after)
    if announcement:
        result["announcement"] = announcement
    return result


# --- Core functions (testable without MCP context) ---


def tree_read(
    store: TreeStore,
    *,
    item_id: str | None = None,
    max_depth: int | None = None,
    output_format: str = "markdown",
    only_open: bool = False,
) -> dict[str, Any]:
    """Read the tree (or one item's subtree) as markdown or structured JSON.

    Args:
        item_id: Item to start from (None = whole tree).
        max_depth: Max depth levels to include (None = unlimited).
        output_format: "markdown" or "json".
        only_open: Only descend into expanded items.
    """
    try:
        if output_format == "json":
            start: Tree = store.tree if item_id is None else (store.queries.get_item(item_id),)
            return {"tree": tree_to_data(start)}

        md = render_tree_as_markdown(
            store.tree, root_id=item_id or ROOT_ID, max_depth=max_depth, only_open=only_open
        )
    except ItemNotFoundError as e:
        return {"error": str(e)}
    return {"content": md, "estimated_tokens": len(md) // 4}


def tree_item_context(
    store: TreeStore,
    *,
    item_id: str,
    sibling_count: int = 3,
) -> dict[str, Any]:
    """Get an item with its breadcrumbs, siblings and children.

    Args:
        item_id: Item id.
        sibling_count: Siblings before/after to include.
    """
    queries = store.queries
    try:
        item = queries.get_item(item_id)
        breadcrumbs = queries.get_breadcrumbs(item_id)
    except ItemNotFoundError as e:
        return {"error": str(e)}

    before, after = get_siblings(store.tree, item_id, count=sibling_count)
    return {
        "item": _item_summary(item),
        "path": list(queries.get_path_to_item(item_id)),
        "breadcrumbs": " > ".join(c.label for c in breadcrumbs),
        "siblings_before": [_item_summary(s) for s in before],
        "siblings_after": [_item_summary(s) for s in after],
        "children": [_item_summary(c) for c in item.children],
    }


def tree_move_targets(store: TreeStore, *, item_id: str) -> dict[str, Any]:
    """List legal new parents for an item, with its current parent.

    Args:
        item_id: Item to be moved.
    """
    queries = store.queries
    try:
        current = default_parent(queries, item_id)
    except ItemNotFoundError as e:
        return {"error": str(e)}

    targets = [
        {"id": t.id or NO_PARENT, "label": t.label, "level": t.level}
        for t in queries.get_move_targets(item_id)
    ]
    return {"targets": targets, "count": len(targets), "current_parent": current.value}


def tree_position_options(store: TreeStore, *, item_id: str, parent: str) -> dict[str, Any]:
    """List the 1-based positions available for an item under a parent.

    Args:
        item_id: Item to be moved or added.
        parent: Parent id, or "NONE" for the top level.
    """
    try:
        positions = position_options(store.queries, parent, item_id)
    except ItemNotFoundError as e:
        return {"error": str(e)}
    return {"positions": positions}


def tree_preview_drop(
    store: TreeStore,
    *,
    item_id: str,
    target_id: str,
    instruction: dict[str, Any],
) -> dict[str, Any]:
    """Resolve a drop instruction without applying it.

    Args:
        item_id: Dragged item.
        target_id: Row under the pointer.
        instruction: Hitbox instruction dict, e.g. {"type": "make-child", "currentLevel": 0}.
    """
    try:
        parsed = parse_instruction_data(instruction)
        resolved = resolve_instruction(store.tree, item_id, target_id, parsed)
        path = store.get_path_to_item(target_id)
    except _CALLER_ERRORS as e:
        return {"error": str(e)}

    if isinstance(resolved, InstructionBlocked):
        return {"blocked": True, "instruction": instruction_to_data(resolved)}
    return {
        "blocked": False,
        "instruction": instruction_to_data(parsed),
        "destination": {"parent_id": resolved.parent_id or NO_PARENT, "index": resolved.index},
        "highlighted_parent": parent_of_instruction(path, parsed),
    }


def tree_drop(
    store: TreeStore,
    *,
    item_id: str,
    target_id: str,
    instruction: dict[str, Any],
) -> dict[str, Any]:
    """Commit a drop of an item onto a target row.

    Args:
        item_id: Dragged item.
        target_id: Row the item was dropped on.
        instruction: Hitbox instruction dict.
    """
    try:
        parsed = parse_instruction_data(instruction)
        resolved = resolve_instruction(store.tree, item_id, target_id, parsed)
        if isinstance(resolved, InstructionBlocked):
            return {
                "success": False,
                "blocked": True,
                "error": f"Dropping {item_id!r} onto {target_id!r} is not allowed.",
            }
        action = ApplyInstruction(instruction=parsed, item_id=item_id, target_id=target_id)
        return _commit(store, action)
    except _CALLER_ERRORS as e:
        return {"success": False, "error": str(e)}


def tree_move(
    store: TreeStore,
    *,
    item_id: str,
    parent: str = NO_PARENT,
    position: int = 1,
) -> dict[str, Any]:
    """Move an item under a new parent at a 1-based position.

    Args:
        item_id: Item to move.
        parent: New parent id, or "NONE" for the top level.
        position: 1-based position among the parent's other children.
    """
    try:
        action = build_move_action(store.queries, item_id, parent=parent, position=position)
        return _commit(store, action)
    except _CALLER_ERRORS as e:
        return {"success": False, "error": str(e)}


def tree_add(
    store: TreeStore,
    *,
    label: str,
    parent: str = NO_PARENT,
    position: int = 1,
    color: str | None = None,
    item_id: str | None = None,
) -> dict[str, Any]:
    """Add a new item.

    Args:
        label: Label for the new item.
        parent: Parent id, or "NONE" for the top level.
        position: 1-based position among the parent's children.
        color: Optional palette color.
        item_id: Optional id (a UUID is generated otherwise).
    """
    try:
        action = build_add_action(
            store.queries,
            label=label,
            parent=parent,
            position=position,
            color=color,
            item_id=item_id,
        )
        return _commit(store, action)
    except _CALLER_ERRORS as e:
        return {"success": False, "error": str(e)}


def tree_edit(
    store: TreeStore,
    *,
    item_id: str,
    label: str,
    color: str | None = None,
) -> dict[str, Any]:
    """Change an item's label and color.

    Args:
        item_id: Item to edit.
        label: New label.
        color: New palette color (None keeps the current one, "" clears it).
    """
    try:
        action = build_edit_action(store.queries, item_id, label=label, color=color)
        return _commit(store, action)
    except _CALLER_ERRORS as e:
        return {"success": False, "error": str(e)}


def tree_remove(store: TreeStore, *, item_id: str) -> dict[str, Any]:
    """Remove an item together with its whole subtree."""
    try:
        removed = sum(1 for _ in iter_items((store.queries.get_item(item_id),)))
        result = _commit(store, NodeRemove(item_id=item_id))
    except ItemNotFoundError as e:
        return {"success": False, "error": str(e)}
    result["removed_count"] = removed
    return result


def tree_toggle(store: TreeStore, *, item_id: str) -> dict[str, Any]:
    """Flip an item's expanded state."""
    try:
        result = _commit(store, Toggle(item_id=item_id))
    except ItemNotFoundError as e:
        return {"success": False, "error": str(e)}
    result["is_open"] = store.queries.get_item(item_id).is_open
    return result


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    store: TreeStore


def _initial_tree() -> Tree:
    tree_file = resolve_tree_file()
    if tree_file is None:
        return sample_tree()
    logger.info("Loading seed tree from {}", tree_file)
    return load_tree(tree_file)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Create the session tree on startup, tear it down on shutdown."""
    store = TreeStore(_initial_tree())
    try:
        yield ServerContext(store=store)
    finally:
        store.close()


mcp_server = FastMCP(
    "treeshift",
    instructions="""\
treeshift holds a tree of labeled, colored items in memory for this session.

## Reorganizing

1. Read the tree with tree_read_tool (markdown shows every item's id).
2. To move an item, prefer tree_move_tool with a parent id and a 1-based
   position. Use tree_move_targets_tool to see which parents are legal;
   an item can never move into its own subtree.
3. tree_drop_tool replays a drag-and-drop instruction (reorder-above,
   reorder-below, make-child, reparent). Use tree_preview_drop_tool first
   to see where it would land or whether it is blocked.

Nothing is saved: the tree is lost when the server stops.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def tree_read_tool(
    ctx: Context,
    item_id: str | None = None,
    max_depth: int | None = None,
    output_format: str = "markdown",
    only_open: bool = False,
) -> dict[str, Any]:
    """Read the tree, or one item's subtree, as markdown or structured JSON.

    Args:
        item_id: Item to start from (None = whole tree).
        max_depth: Max depth levels (None = unlimited).
        output_format: "markdown" (human-readable) or "json" (structured).
        only_open: Only descend into expanded items.
    """
    return tree_read(
        _ctx(ctx).store,
        item_id=item_id,
        max_depth=max_depth,
        output_format=output_format,
        only_open=only_open,
    )


@mcp_server.tool()
async def tree_item_context_tool(
    ctx: Context,
    item_id: str,
    sibling_count: int = 3,
) -> dict[str, Any]:
    """Get an item with its breadcrumbs, siblings and children.

    Args:
        item_id: Item id.
        sibling_count: Siblings before/after to include.
    """
    return tree_item_context(_ctx(ctx).store, item_id=item_id, sibling_count=sibling_count)


@mcp_server.tool()
async def tree_move_targets_tool(ctx: Context, item_id: str) -> dict[str, Any]:
    """List the parents an item may legally be moved under.

    Args:
        item_id: Item to be moved.
    """
    return tree_move_targets(_ctx(ctx).store, item_id=item_id)


@mcp_server.tool()
async def tree_position_options_tool(ctx: Context, item_id: str, parent: str) -> dict[str, Any]:
    """List the 1-based positions available for an item under a parent.

    Args:
        item_id: Item to be moved or added.
        parent: Parent id, or "NONE" for the top level.
    """
    return tree_position_options(_ctx(ctx).store, item_id=item_id, parent=parent)


@mcp_server.tool()
async def tree_preview_drop_tool(
    ctx: Context,
    item_id: str,
    target_id: str,
    instruction: dict[str, Any],
) -> dict[str, Any]:
    """Show where a drop instruction would land, without changing the tree.

    Args:
        item_id: Dragged item.
        target_id: Row under the pointer.
        instruction: e.g. {"type": "reorder-below", "currentLevel": 1} or
            {"type": "reparent", "currentLevel": 2, "desiredLevel": 0}.
    """
    return tree_preview_drop(
        _ctx(ctx).store, item_id=item_id, target_id=target_id, instruction=instruction
    )


@mcp_server.tool()
async def tree_drop_tool(
    ctx: Context,
    item_id: str,
    target_id: str,
    instruction: dict[str, Any],
) -> dict[str, Any]:
    """Drop an item onto a target row using a drag-and-drop instruction.

    Args:
        item_id: Dragged item.
        target_id: Row the item is dropped on.
        instruction: Instruction dict (see tree_preview_drop_tool).
    """
    return tree_drop(_ctx(ctx).store, item_id=item_id, target_id=target_id, instruction=instruction)


@mcp_server.tool()
async def tree_move_tool(
    ctx: Context,
    item_id: str,
    parent: str = NO_PARENT,
    position: int = 1,
) -> dict[str, Any]:
    """Move an item under a new parent.

    Args:
        item_id: Item to move.
        parent: New parent id, or "NONE" for the top level.
        position: 1-based position among the parent's other children.
    """
    return tree_move(_ctx(ctx).store, item_id=item_id, parent=parent, position=position)


@mcp_server.tool()
async def tree_add_tool(
    ctx: Context,
    label: str,
    parent: str = NO_PARENT,
    position: int = 1,
    color: str | None = None,
) -> dict[str, Any]:
    """Add a new item.

    Args:
        label: Label for the new item.
        parent: Parent id, or "NONE" for the top level.
        position: 1-based position among the parent's children.
        color: One of red, blue, green, yellow, purple, pink, indigo, teal,
            orange, cyan, lime, gray.
    """
    return tree_add(_ctx(ctx).store, label=label, parent=parent, position=position, color=color)


@mcp_server.tool()
async def tree_edit_tool(
    ctx: Context,
    item_id: str,
    label: str,
    color: str | None = None,
) -> dict[str, Any]:
    """Change an item's label and color. Position and children are kept.

    Args:
        item_id: Item to edit.
        label: New label.
        color: New color (omit to keep, "" to clear).
    """
    return tree_edit(_ctx(ctx).store, item_id=item_id, label=label, color=color)


@mcp_server.tool()
async def tree_remove_tool(ctx: Context, item_id: str) -> dict[str, Any]:
    """Remove an item and everything nested under it.

    Args:
        item_id: Item to remove.
    """
    return tree_remove(_ctx(ctx).store, item_id=item_id)


@mcp_server.tool()
async def tree_toggle_tool(ctx: Context, item_id: str) -> dict[str, Any]:
    """Expand or collapse an item.

    Args:
        item_id: Item to toggle.
    """
    return tree_toggle(_ctx(ctx).store, item_id=item_id)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from treeshift.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
