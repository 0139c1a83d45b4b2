"""
Host model for a nested set table.

``NestedSetTable`` owns a store and a ``NestedSetBehavior`` and calls the
behavior's hooks at the matching points of each write, so node rows can be
created, saved and deleted without any other persistence framework.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from .behavior import NestedSetBehavior
from .config import NestedSetConfig
from .exceptions import InvalidArgumentError, InvalidStateError, UnresolvedTargetError
from .node import UNCHANGED, Node
from .sql import eq, is_null
from .store import NodeStore, SQLNodeStore, open_store

logger = logging.getLogger(__name__)


class NestedSetTable:
    """Rows of one hosted table with nested set lifecycle hooks applied."""

    def __init__(self, store: NodeStore) -> None:
        """
        Initialize table.

        Args:
            store: Node store of the hosted table
        """
        self.store = store
        self.columns = store.columns
        self.behavior = NestedSetBehavior(store)

    @classmethod
    def from_config(cls, config: NestedSetConfig) -> "NestedSetTable":
        """Open the configured store, creating the table if needed."""
        return cls(open_store(config.store, config.columns))

    def close(self) -> None:
        if isinstance(self.store, SQLNodeStore):
            self.store.close()

    def __enter__(self) -> "NestedSetTable":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    #
    # Reads
    #

    def find(self, node_id: Any) -> Optional[Node]:
        return self.store.fetch_by_id(node_id)

    def get(self, node_id: Any) -> Node:
        """
        Fetch a node that must exist.

        Raises:
            UnresolvedTargetError: If no row has this key
        """
        node = self.store.fetch_by_id(node_id)
        if node is None:
            raise UnresolvedTargetError(f"Node {node_id} not found.")
        return node

    def all(self) -> List[Node]:
        """Every row in preorder."""
        return self.behavior.new_query().get()

    def roots(self) -> List[Node]:
        return self.behavior.new_query().where(is_null(self.columns.parent_column)).get()

    #
    # Writes
    #

    def new_node(self, parent_id: Any = None, **payload: Any) -> Node:
        """Build an unsaved node; unknown payload keys are rejected."""
        unknown = set(payload) - set(self.columns.payload_columns)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown payload columns: {sorted(unknown)}", argument="payload"
            )
        return Node(parent_id=parent_id, payload=dict(payload))

    def create(self, parent_id: Any = None, **payload: Any) -> Node:
        """Insert a node, appended as a root and then moved under its parent."""
        return self.save(self.new_node(parent_id, **payload))

    def save(self, node: Node) -> Node:
        """
        Insert or update a node row.

        Runs the before-create (new rows), before-save and after-save hooks
        around the write in one transaction; a failing realignment rolls the
        write back.

        Returns:
            The saved node with its final bounds and depth
        """
        creating = not node.exists
        previous_parent = node.original_parent_id
        try:
            with self.store.transaction():
                if creating:
                    self.behavior.on_before_create(node)
                self.behavior.on_before_save(node)
                if creating:
                    self.store.insert(node)
                else:
                    self.store.write(node)
                self.behavior.on_after_save(node)
        except Exception:
            node.pending_parent = UNCHANGED
            if creating:
                node.id = None
                node.exists = False
                node.left = node.right = node.depth = None
            else:
                node.original_parent_id = previous_parent
            raise

        logger.info(
            "%s node %s at (%s, %s) depth %s",
            "Created" if creating else "Saved",
            node.id,
            node.left,
            node.right,
            node.depth,
        )
        return node

    def delete(self, node: Node) -> None:
        """Delete a node together with its whole subtree."""
        if not node.exists:
            raise InvalidStateError("Cannot delete a node that was never saved.")
        with self.store.transaction():
            self.behavior.on_before_delete(node)
            self.store.delete(eq(self.columns.key_column, node.id))
        node.exists = False
        logger.info("Deleted node %s", node.id)
