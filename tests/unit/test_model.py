"""Tests for the pure tree functions."""

import pytest

from treeshift.config import ROOT_ID
from treeshift.core.tree.model import (
    children_of,
    collect_ids,
    delete_by_id,
    find_item,
    index_of,
    insert_at,
    is_descendant,
    item_mode,
    iter_items,
    move_item,
    parent_of,
    path_to,
    remove_by_id,
    require_path,
    set_open,
    update_by_id,
)
from treeshift.errors import ItemNotFoundError
from treeshift.models.item import Color, ItemMode, Tree, TreeItem


def _ids(tree: Tree) -> list[str]:
    return [item.id for item in tree]


def test_iter_items_is_preorder_with_levels(deep_tree: Tree) -> None:
    assert [(item.id, level) for item, level in iter_items(deep_tree)] == [
        ("a", 0),
        ("a1", 1),
        ("a1x", 2),
        ("a1y", 2),
        ("a2", 1),
        ("b", 0),
        ("b1", 1),
        ("c", 0),
    ]


def test_path_to_lists_ancestors_root_first(deep_tree: Tree) -> None:
    assert path_to(deep_tree, "a1y") == ("a", "a1")
    assert path_to(deep_tree, "b") == ()
    assert path_to(deep_tree, "missing") is None


def test_require_path_raises_for_unknown_id(deep_tree: Tree) -> None:
    with pytest.raises(ItemNotFoundError):
        require_path(deep_tree, "missing")


def test_path_to_every_item_resolves_back_to_it(deep_tree: Tree) -> None:
    """Following a path's last id gives the parent holding the item."""
    for item, level in iter_items(deep_tree):
        path = require_path(deep_tree, item.id)
        assert len(path) == level
        assert item in children_of(deep_tree, path[-1] if path else ROOT_ID)


def test_children_of_root_is_top_level(deep_tree: Tree) -> None:
    assert children_of(deep_tree, ROOT_ID) is deep_tree
    assert _ids(children_of(deep_tree, "a1")) == ["a1x", "a1y"]
    assert children_of(deep_tree, "c") == ()


def test_children_of_unknown_parent_raises(deep_tree: Tree) -> None:
    with pytest.raises(ItemNotFoundError):
        children_of(deep_tree, "missing")


def test_parent_and_index(deep_tree: Tree) -> None:
    assert parent_of(deep_tree, "a2") == "a"
    assert parent_of(deep_tree, "c") == ROOT_ID
    assert index_of(deep_tree, "a1y") == ("a1", 1)


def test_is_descendant_is_strict(deep_tree: Tree) -> None:
    assert is_descendant(deep_tree, "a", "a1x")
    assert is_descendant(deep_tree, "a1", "a1y")
    assert not is_descendant(deep_tree, "a", "a")
    assert not is_descendant(deep_tree, "a1x", "a")
    assert not is_descendant(deep_tree, "b", "a1")
    assert not is_descendant(deep_tree, "missing", "a")


def test_insert_at_clamps_index(small_tree: Tree) -> None:
    new = TreeItem(id="new", label="New")
    assert _ids(insert_at(small_tree, ROOT_ID, 99, new)) == ["1", "2", "new"]
    assert _ids(insert_at(small_tree, ROOT_ID, -5, new)) == ["new", "1", "2"]
    nested = insert_at(small_tree, "2", 0, new)
    assert _ids(children_of(nested, "2")) == ["new", "2.1"]


def test_insert_into_empty_container(small_tree: Tree) -> None:
    tree = insert_at(small_tree, "1", 0, TreeItem(id="x", label="X"))
    assert _ids(children_of(tree, "1")) == ["x"]


def test_mutations_do_not_touch_input(small_tree: Tree) -> None:
    before = small_tree
    insert_at(small_tree, "2", 0, TreeItem(id="x", label="X"))
    delete_by_id(small_tree, "2")
    assert small_tree is before
    assert _ids(children_of(small_tree, "2")) == ["2.1"]


def test_untouched_subtrees_are_shared(deep_tree: Tree) -> None:
    updated = update_by_id(deep_tree, "a1x", label="Renamed", color=None)
    assert updated[1] is deep_tree[1]
    assert find_item(updated, "a2") is find_item(deep_tree, "a2")


def test_remove_by_id_returns_detached_subtree(deep_tree: Tree) -> None:
    tree, removed = remove_by_id(deep_tree, "a1")
    assert removed.id == "a1"
    assert _ids(removed.children) == ["a1x", "a1y"]
    assert collect_ids(tree) == collect_ids(deep_tree) - {"a1", "a1x", "a1y"}


def test_delete_by_id_unknown_raises(deep_tree: Tree) -> None:
    with pytest.raises(ItemNotFoundError):
        delete_by_id(deep_tree, "missing")


def test_update_keeps_structure(deep_tree: Tree) -> None:
    updated = update_by_id(deep_tree, "a", label="A!", color=Color.PINK)
    item = find_item(updated, "a")
    assert item is not None
    assert item.label == "A!"
    assert item.color is Color.PINK
    assert item.is_open
    assert item.children == find_item(deep_tree, "a").children  # type: ignore[union-attr]
    assert _ids(updated) == _ids(deep_tree)


def test_set_open(deep_tree: Tree) -> None:
    tree = set_open(deep_tree, "b", True)
    assert find_item(tree, "b").is_open  # type: ignore[union-attr]


def test_move_item_forward_in_same_parent_compensates(deep_tree: Tree) -> None:
    # Index 3 before detachment is "after c"; after removing "a" that is slot 2.
    tree = move_item(deep_tree, "a", ROOT_ID, 3)
    assert _ids(tree) == ["b", "c", "a"]


def test_move_item_backward_in_same_parent(deep_tree: Tree) -> None:
    tree = move_item(deep_tree, "c", ROOT_ID, 0)
    assert _ids(tree) == ["c", "a", "b"]


def test_move_item_to_other_parent_carries_subtree(deep_tree: Tree) -> None:
    tree = move_item(deep_tree, "a1", "b", 1)
    assert _ids(children_of(tree, "b")) == ["b1", "a1"]
    assert _ids(children_of(tree, "a1")) == ["a1x", "a1y"]
    assert collect_ids(tree) == collect_ids(deep_tree)


@pytest.mark.parametrize(
    ("item_id", "index", "expected"),
    [
        ("a", 0, ItemMode.EXPANDED),
        ("b", 1, ItemMode.STANDARD),
        ("c", 2, ItemMode.LAST_IN_GROUP),
    ],
)
def test_item_mode(deep_tree: Tree, item_id: str, index: int, expected: ItemMode) -> None:
    item = find_item(deep_tree, item_id)
    assert item is not None
    assert item_mode(item, index, len(deep_tree)) is expected


def test_remove_then_reinsert_restores_tree(deep_tree: Tree) -> None:
    for item_id in collect_ids(deep_tree):
        parent_id, index = index_of(deep_tree, item_id)
        detached, item = remove_by_id(deep_tree, item_id)
        assert insert_at(detached, parent_id, index, item) == deep_tree, item_id
