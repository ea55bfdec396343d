"""Shared test fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

from treeshift.core.importer.json_reader import parse_tree_data
from treeshift.core.store import TreeStore
from treeshift.models.item import Tree

SMALL_TREE_DATA: list[dict[str, Any]] = [
    {"id": "1", "label": "Item 1", "children": []},
    {
        "id": "2",
        "label": "Item 2",
        "children": [{"id": "2.1", "label": "Item 2.1", "children": []}],
    },
]

DEEP_TREE_DATA: list[dict[str, Any]] = [
    {
        "id": "a",
        "label": "Alpha",
        "color": "red",
        "isOpen": True,
        "children": [
            {
                "id": "a1",
                "label": "Alpha 1",
                "children": [
                    {"id": "a1x", "label": "Alpha 1 x", "children": []},
                    {"id": "a1y", "label": "Alpha 1 y", "children": []},
                ],
            },
            {"id": "a2", "label": "Alpha 2", "children": []},
        ],
    },
    {
        "id": "b",
        "label": "Beta",
        "color": "blue",
        "children": [{"id": "b1", "label": "Beta 1", "children": []}],
    },
    {"id": "c", "label": "Gamma", "children": []},
]


@pytest.fixture
def small_tree() -> Tree:
    """Two top-level items; "2" holds a single child "2.1"."""
    return parse_tree_data(SMALL_TREE_DATA)


@pytest.fixture
def deep_tree() -> Tree:
    """Three levels deep, with "a" expanded and "b" collapsed."""
    return parse_tree_data(DEEP_TREE_DATA)


@pytest.fixture
def store(deep_tree: Tree) -> TreeStore:
    return TreeStore(deep_tree)


@pytest.fixture
def tree_file(tmp_path: Path) -> Path:
    """The deep tree written to a JSON file."""
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(DEEP_TREE_DATA))
    return path
