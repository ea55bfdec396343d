"""Tests for the query facade and the row registry."""

import pytest

from treeshift.config import ROOT_ID
from treeshift.core.queries import NO_PARENT_LABEL, TreeItemRegistry, TreeQueries
from treeshift.errors import ItemNotFoundError
from treeshift.models.item import Breadcrumb, MoveTarget, Tree


def test_lookups(deep_tree: Tree) -> None:
    queries = TreeQueries(deep_tree)
    assert "a1x" in queries
    assert "missing" not in queries
    assert queries.get_item("b1").label == "Beta 1"
    assert queries.get_path_to_item("a1x") == ("a", "a1")
    assert queries.get_parent_id("a") == ROOT_ID
    assert [c.id for c in queries.get_children_of_item("a")] == ["a1", "a2"]
    assert queries.get_children_of_item(ROOT_ID) is deep_tree


def test_unknown_ids_raise(deep_tree: Tree) -> None:
    queries = TreeQueries(deep_tree)
    with pytest.raises(ItemNotFoundError):
        queries.get_item("missing")
    with pytest.raises(ItemNotFoundError):
        queries.get_path_to_item("missing")
    with pytest.raises(ItemNotFoundError):
        queries.get_children_of_item("missing")


def test_move_targets_skip_own_subtree(deep_tree: Tree) -> None:
    targets = TreeQueries(deep_tree).get_move_targets("a1")
    assert targets[0] == MoveTarget(id=ROOT_ID, label=NO_PARENT_LABEL, level=-1)
    assert [t.id for t in targets[1:]] == ["a", "a2", "b", "b1", "c"]


def test_move_targets_never_contain_item_or_descendants(deep_tree: Tree) -> None:
    queries = TreeQueries(deep_tree)
    for item_id in ["a", "a1", "a1x", "b", "c"]:
        item = queries.get_item(item_id)
        excluded = {item_id} | {c.id for c in item.children}
        ids = {t.id for t in queries.get_move_targets(item_id)}
        assert ROOT_ID in ids
        assert not ids & excluded


def test_move_targets_for_new_item_offer_everything(deep_tree: Tree) -> None:
    targets = TreeQueries(deep_tree).get_move_targets("not-yet-added")
    assert len(targets) == 1 + 8


def test_breadcrumbs(deep_tree: Tree) -> None:
    assert TreeQueries(deep_tree).get_breadcrumbs("a1y") == (
        Breadcrumb(item_id="a", label="Alpha", depth=0),
        Breadcrumb(item_id="a1", label="Alpha 1", depth=1),
    )


def test_registry_register_and_dispose() -> None:
    registry = TreeItemRegistry()
    dispose = registry.register(item_id="a", element="row", action_menu_trigger="button")
    assert "a" in registry
    entry = registry.get("a")
    assert entry is not None
    assert entry.action_menu_trigger == "button"

    dispose()
    assert "a" not in registry
    dispose()  # second call is harmless
    assert len(registry) == 0


def test_stale_disposer_keeps_newer_registration() -> None:
    registry = TreeItemRegistry()
    old_dispose = registry.register(item_id="a", element="old", action_menu_trigger=None)
    registry.register(item_id="a", element="new", action_menu_trigger=None)

    old_dispose()
    entry = registry.get("a")
    assert entry is not None
    assert entry.element == "new"


def test_registry_clear() -> None:
    registry = TreeItemRegistry()
    registry.register(item_id="a", element=None, action_menu_trigger=None)
    registry.register(item_id="b", element=None, action_menu_trigger=None)
    registry.clear()
    assert len(registry) == 0
    assert registry.get("a") is None
