"""Tests for configuration and logging setup."""

from pathlib import Path

import pytest

from treeshift.config import TREE_FILE_ENV, resolve_tree_file
from treeshift.errors import FormValidationError, ItemNotFoundError
from treeshift.logging_config import configure_logging


def test_resolve_tree_file_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TREE_FILE_ENV, raising=False)
    assert resolve_tree_file() is None
    monkeypatch.setenv(TREE_FILE_ENV, "")
    assert resolve_tree_file() is None


def test_resolve_tree_file_expands_user(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", "/home/someone")
    monkeypatch.setenv(TREE_FILE_ENV, "~/tree.json")
    assert resolve_tree_file() == Path("/home/someone/tree.json")


def test_errors_carry_context() -> None:
    err = FormValidationError("label", "must not be empty")
    assert (err.field, err.message) == ("label", "must not be empty")
    assert str(err) == "label: must not be empty"
    assert isinstance(ItemNotFoundError("x"), LookupError)
    assert ItemNotFoundError("x").item_id == "x"


def test_configure_logging_is_repeatable() -> None:
    configure_logging(verbose=True)
    configure_logging(verbose=False)
