"""Tests for the add, edit and move dialog helpers."""

import uuid

import pytest

from treeshift.config import NO_PARENT, ROOT_ID
from treeshift.core.forms import (
    Option,
    build_add_action,
    build_edit_action,
    build_move_action,
    default_parent,
    parent_options,
    parent_value_to_id,
    position_options,
)
from treeshift.core.queries import TreeQueries
from treeshift.core.reducer import initial_state, reduce
from treeshift.errors import FormValidationError
from treeshift.models.action import ModalMove
from treeshift.models.item import Color, Tree


@pytest.fixture
def queries(deep_tree: Tree) -> TreeQueries:
    return TreeQueries(deep_tree)


def test_parent_value_to_id() -> None:
    assert parent_value_to_id(NO_PARENT) == ROOT_ID
    assert parent_value_to_id("b") == "b"


def test_parent_options_start_with_no_parent(queries: TreeQueries) -> None:
    options = parent_options(queries, "a1")
    assert options[0] == Option(label="No parent", value=NO_PARENT)
    assert [o.value for o in options[1:]] == ["a", "a2", "b", "b1", "c"]


def test_default_parent(queries: TreeQueries) -> None:
    assert default_parent(queries, "a1") == Option(label="Alpha", value="a")
    assert default_parent(queries, "c").value == NO_PARENT


def test_position_options_exclude_moved_item(queries: TreeQueries) -> None:
    assert position_options(queries, NO_PARENT, "c") == [1, 2, 3]
    assert position_options(queries, "b", "c") == [1, 2]
    assert position_options(queries, "c", "b1") == [1]


def test_move_within_same_parent_lands_on_chosen_position(queries: TreeQueries) -> None:
    action = build_move_action(queries, "a", parent=NO_PARENT, position=3)
    assert action == ModalMove(item_id="a", target_id=ROOT_ID, index=3)
    state = reduce(initial_state(queries.tree), action)
    assert [item.id for item in state.tree] == ["b", "c", "a"]


def test_every_position_choice_is_honored(queries: TreeQueries) -> None:
    for item_id, parent in [("a1x", "a1"), ("a1y", "a1"), ("a2", "a1"), ("c", NO_PARENT)]:
        for position in position_options(queries, parent, item_id):
            action = build_move_action(queries, item_id, parent=parent, position=position)
            tree = reduce(initial_state(queries.tree), action).tree
            siblings = TreeQueries(tree).get_children_of_item(parent_value_to_id(parent))
            assert siblings[position - 1].id == item_id, (item_id, parent, position)


def test_move_to_other_parent(queries: TreeQueries) -> None:
    action = build_move_action(queries, "c", parent="b", position=2)
    assert action == ModalMove(item_id="c", target_id="b", index=1)


def test_move_into_own_subtree_is_rejected(queries: TreeQueries) -> None:
    with pytest.raises(FormValidationError) as exc_info:
        build_move_action(queries, "a", parent="a1", position=1)
    assert exc_info.value.field == "parent"


def test_move_position_out_of_range(queries: TreeQueries) -> None:
    with pytest.raises(FormValidationError) as exc_info:
        build_move_action(queries, "c", parent="b", position=3)
    assert exc_info.value.field == "position"


def test_add_generates_uuid_and_strips_label(queries: TreeQueries) -> None:
    action = build_add_action(queries, label="  Delta  ", color="lime")
    uuid.UUID(action.item_id)
    assert action.item.id == action.item_id
    assert action.item.label == "Delta"
    assert action.item.color is Color.LIME
    assert (action.target_id, action.index) == (ROOT_ID, 0)


def test_add_under_parent_at_end(queries: TreeQueries) -> None:
    action = build_add_action(queries, label="New", parent="a", position=3, item_id="n")
    state = reduce(initial_state(queries.tree), action)
    assert [c.id for c in TreeQueries(state.tree).get_children_of_item("a")] == ["a1", "a2", "n"]


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"label": "   "}, "label"),
        ({"label": "X", "color": "mauve"}, "color"),
        ({"label": "X", "parent": "missing"}, "parent"),
        ({"label": "X", "position": 5}, "position"),
    ],
)
def test_add_validation(queries: TreeQueries, kwargs: dict, field: str) -> None:
    with pytest.raises(FormValidationError) as exc_info:
        build_add_action(queries, **kwargs)
    assert exc_info.value.field == field


def test_edit_keeps_color_unless_given(queries: TreeQueries) -> None:
    assert build_edit_action(queries, "a", label="A").item.color is Color.RED
    assert build_edit_action(queries, "a", label="A", color="").item.color is None
    assert build_edit_action(queries, "a", label="A", color="cyan").item.color is Color.CYAN


def test_edit_requires_label(queries: TreeQueries) -> None:
    with pytest.raises(FormValidationError):
        build_edit_action(queries, "a", label="")


def test_default_parent_of_unknown_item_raises(queries: TreeQueries) -> None:
    with pytest.raises(LookupError):
        default_parent(queries, "missing")
