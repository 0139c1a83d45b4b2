"""
Pytest fixtures for nested set tests.

Provides a temporary SQLite store, a host table on top of it and a small
tree builder.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from typing import Any, Dict, List, Tuple

import pytest

from nested_set.core.config import ColumnConfig, StoreConfig
from nested_set.core.integrity import check_store
from nested_set.core.node import Node
from nested_set.core.store import open_store
from nested_set.core.table import NestedSetTable


@pytest.fixture
def temp_db_path(tmp_path):
    """Create temporary database path."""
    return tmp_path / "tree.db"


@pytest.fixture
def columns():
    """Default column naming."""
    return ColumnConfig()


@pytest.fixture
def store(temp_db_path, columns):
    """SQLite-backed node store with the hosted table created."""
    node_store = open_store(StoreConfig(path=str(temp_db_path)), columns)
    yield node_store
    node_store.close()


@pytest.fixture
def table(store):
    """Host table over the temporary store."""
    return NestedSetTable(store)


@pytest.fixture
def build(table):
    """
    Build a tree from ``(name, parent_name)`` pairs in creation order.

    Returns a dict of name -> saved Node.
    """

    def _build(layout: List[Tuple[str, Any]]) -> Dict[str, Node]:
        nodes: Dict[str, Node] = {}
        for name, parent in layout:
            parent_id = nodes[parent].id if parent is not None else None
            nodes[name] = table.create(parent_id, name=name)
        return nodes

    return _build


@pytest.fixture
def snapshot(table):
    """Return ``{name: (left, right, depth, parent_name)}`` of every stored row."""

    def _snapshot() -> Dict[str, Tuple[int, int, int, Any]]:
        rows = table.all()
        names = {node.id: node["name"] for node in rows}
        return {
            node["name"]: (node.left, node.right, node.depth, names.get(node.parent_id))
            for node in rows
        }

    return _snapshot


@pytest.fixture
def assert_consistent(table):
    """Assert that every nested set invariant holds for the stored rows."""

    def _assert() -> None:
        report = check_store(table.store)
        assert report.ok, report.message

    return _assert
