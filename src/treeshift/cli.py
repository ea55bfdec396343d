"""CLI for treeshift (show, reorganize, MCP server)."""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from treeshift.config import NO_PARENT, resolve_tree_file
from treeshift.core.forms import parent_value_to_id
from treeshift.core.importer.json_reader import load_tree, sample_tree, tree_to_data
from treeshift.core.store import TreeStore
from treeshift.core.tree.markdown import render_children_summary, render_tree_as_markdown
from treeshift.logging_config import configure_logging
from treeshift.mcp import server

app = typer.Typer(help="treeshift: reorganize a tree of labeled items.")

TreeFile = Annotated[
    Path | None,
    typer.Option("--tree", "-t", help="JSON file with the seed tree (default: sample tree)"),
]
JsonFlag = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_store(tree_file: Path | None) -> TreeStore:
    """Load the seed tree, exiting with an error if it cannot be read."""
    path = tree_file or resolve_tree_file()
    if path is None:
        return TreeStore(sample_tree())
    if not path.exists():
        logger.error("Tree file not found: {}", path)
        raise typer.Exit(1)
    try:
        return TreeStore(load_tree(path))
    except ValueError as e:
        logger.error("Invalid tree file {}: {}", path, e)
        raise typer.Exit(1) from None


def _report(store: TreeStore, result: dict[str, Any], *, output_json: bool) -> None:
    """Print a tool result followed by the resulting tree."""
    if output_json:
        typer.echo(json.dumps({**result, "tree": tree_to_data(store.tree)}, indent=2))
    else:
        if "error" in result:
            typer.echo(result["error"])
        elif "announcement" in result:
            typer.echo(result["announcement"])
        typer.echo(render_tree_as_markdown(store.tree), nl=False)

    if "error" in result:
        raise typer.Exit(1)


@app.command()
def show(
    item_id: Annotated[
        str | None,
        typer.Option("--item", "-i", help="Only show this item's subtree"),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    only_open: bool = typer.Option(False, "--open-only", help="Skip collapsed items' children"),
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """Show the tree as markdown."""
    store = _open_store(tree_file)
    result = server.tree_read(
        store,
        item_id=item_id,
        max_depth=max_depth,
        output_format="json" if output_json else "markdown",
        only_open=only_open,
    )
    if "error" in result:
        typer.echo(result["error"])
        raise typer.Exit(1)
    if output_json:
        typer.echo(json.dumps(result["tree"], indent=2))
    else:
        typer.echo(result["content"], nl=False)


@app.command()
def targets(
    item_id: str = typer.Argument(..., help="Item to be moved"),
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """List the parents an item may legally move under."""
    store = _open_store(tree_file)
    result = server.tree_move_targets(store, item_id=item_id)
    if "error" in result:
        typer.echo(result["error"])
        raise typer.Exit(1)
    if output_json:
        typer.echo(json.dumps(result, indent=2))
        return

    typer.echo(f"{result['count']} targets for {item_id}:\n")
    for target in result["targets"]:
        marker = "*" if target["id"] == result["current_parent"] else " "
        indent = "  " * (target["level"] + 1)
        typer.echo(f" {marker}{indent}{target['label']}  [id={target['id']}]")


@app.command()
def positions(
    item_id: str = typer.Argument(..., help="Item to be moved"),
    parent: str = typer.Option(NO_PARENT, "--parent", "-p", help="Parent id (NONE = top level)"),
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """List the 1-based positions available under a parent."""
    store = _open_store(tree_file)
    result = server.tree_position_options(store, item_id=item_id, parent=parent)
    if "error" in result:
        typer.echo(result["error"])
        raise typer.Exit(1)
    if output_json:
        typer.echo(json.dumps(result, indent=2))
    else:
        summary = render_children_summary(store.tree, parent_value_to_id(parent))
        if summary:
            typer.echo(summary)
        typer.echo("Positions: " + " ".join(str(p) for p in result["positions"]))


@app.command()
def drop(
    item_id: str = typer.Argument(..., help="Dragged item"),
    target_id: str = typer.Argument(..., help="Row the item is dropped on"),
    instruction: str = typer.Option(
        ...,
        "--instruction",
        "-I",
        help="reorder-above, reorder-below, make-child or reparent",
    ),
    desired_level: Annotated[
        int | None,
        typer.Option("--desired-level", "-L", help="Target level for reparent (0 = top)"),
    ] = None,
    preview: bool = typer.Option(False, "--preview", help="Only show where it would land"),
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """Drop an item onto a row, as a drag-and-drop gesture would."""
    store = _open_store(tree_file)
    try:
        current_level = len(store.get_path_to_item(target_id))
    except LookupError as e:
        typer.echo(str(e))
        raise typer.Exit(1) from None

    data: dict[str, Any] = {"type": instruction, "currentLevel": current_level}
    if desired_level is not None:
        data["desiredLevel"] = desired_level

    if preview:
        result = server.tree_preview_drop(
            store, item_id=item_id, target_id=target_id, instruction=data
        )
        typer.echo(json.dumps(result, indent=2))
        if "error" in result:
            raise typer.Exit(1)
        return

    result = server.tree_drop(store, item_id=item_id, target_id=target_id, instruction=data)
    _report(store, result, output_json=output_json)


@app.command()
def move(
    item_id: str = typer.Argument(..., help="Item to move"),
    parent: str = typer.Option(NO_PARENT, "--parent", "-p", help="New parent id (NONE = top)"),
    position: int = typer.Option(1, "--position", "-n", help="1-based position"),
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """Move an item under a new parent."""
    store = _open_store(tree_file)
    result = server.tree_move(store, item_id=item_id, parent=parent, position=position)
    _report(store, result, output_json=output_json)


@app.command()
def add(
    label: str = typer.Argument(..., help="Label for the new item"),
    parent: str = typer.Option(NO_PARENT, "--parent", "-p", help="Parent id (NONE = top)"),
    position: int = typer.Option(1, "--position", "-n", help="1-based position"),
    color: Annotated[str | None, typer.Option("--color", "-c", help="Palette color")] = None,
    new_id: Annotated[
        str | None, typer.Option("--id", help="Id for the new item (default: UUID)")
    ] = None,
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """Add a new item."""
    store = _open_store(tree_file)
    result = server.tree_add(
        store, label=label, parent=parent, position=position, color=color, item_id=new_id
    )
    _report(store, result, output_json=output_json)


@app.command()
def edit(
    item_id: str = typer.Argument(..., help="Item to edit"),
    label: str = typer.Option(..., "--label", "-l", help="New label"),
    color: Annotated[
        str | None, typer.Option("--color", "-c", help="New color ('' clears it)")
    ] = None,
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """Change an item's label and color."""
    store = _open_store(tree_file)
    result = server.tree_edit(store, item_id=item_id, label=label, color=color)
    _report(store, result, output_json=output_json)


@app.command()
def remove(
    item_id: str = typer.Argument(..., help="Item to remove"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    tree_file: TreeFile = None,
    output_json: JsonFlag = False,
) -> None:
    """Remove an item and everything nested under it."""
    store = _open_store(tree_file)
    if item_id in store.queries and not yes:
        label = store.queries.get_item(item_id).label
        typer.confirm(f'Are you sure you want to remove "{label}"?', abort=True)
    result = server.tree_remove(store, item_id=item_id)
    _report(store, result, output_json=output_json)


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    server.run_mcp_server()
