"""
Mutation engine for nested set tables.

Keeps the left/right/depth/parent columns consistent while nodes are
created, moved and deleted. Every multi-row change runs inside one store
transaction; validation happens before anything is written.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .bounds import (
    is_inside_subtree,
    is_noop_move,
    next_free_bounds,
    sorted_boundaries,
    subtree_width,
    validate_position,
)
from .constants import POSITION_CHILD, POSITION_LEFT, POSITION_RIGHT
from .exceptions import InvalidMoveError, InvalidStateError, UnresolvedTargetError
from .node import UNCHANGED, Node
from .queries import NestedSetQueries
from .sql import Case, and_, between, column_ref, eq, gt, lt, or_, plus
from .store import NodeStore

logger = logging.getLogger(__name__)

Target = Union[Node, Any]


class MutationEngine:
    """Insert, move and delete operations over one hosted table."""

    def __init__(
        self, store: NodeStore, queries: Optional[NestedSetQueries] = None
    ) -> None:
        """
        Initialize engine.

        Args:
            store: Transactional node store
            queries: Query translator (created from the store if omitted)
        """
        self.store = store
        self.columns = store.columns
        self.queries = queries or NestedSetQueries(store)

    #
    # Creation
    #

    def set_default_left_and_right(self, node: Node) -> Node:
        """Give a new node the next free bounds, making it the rightmost root."""
        highest = self.store.fetch_ordered_by(
            self.columns.right_column, "desc", limit=1
        )
        max_right = highest[0].right if highest else None
        node.left, node.right = next_free_bounds(max_right)
        logger.debug("New node bounds (%s, %s)", node.left, node.right)
        return node

    #
    # Realignment after a direct parent change
    #

    def store_new_parent(self, node: Node) -> None:
        """Capture a changed parent column before the row is written."""
        node.pending_parent = node.parent_id if node.is_parent_dirty() else UNCHANGED

    def move_to_new_parent(self, node: Node) -> Node:
        """Realign the node under the parent captured by ``store_new_parent``."""
        pending = node.pending_parent
        node.pending_parent = UNCHANGED
        if pending is UNCHANGED:
            return node
        if pending is None:
            return self.make_root(node)
        return self.make_child_of(node, pending)

    #
    # Alignment
    #

    def make_root(self, node: Node) -> Node:
        """Move the node right of its tree's root, making it a root itself."""
        self._refresh(node)
        return self.move_to_right_of(node, self.queries.root(node))

    def make_child_of(self, node: Node, target: Target) -> Node:
        return self.move_to(node, target, POSITION_CHILD)

    def move_left(self, node: Node) -> Node:
        """Swap places with the immediate left sibling."""
        self._refresh(node)
        return self.move_to_left_of(node, self.queries.left_sibling(node))

    def move_right(self, node: Node) -> Node:
        """Swap places with the immediate right sibling."""
        self._refresh(node)
        return self.move_to_right_of(node, self.queries.right_sibling(node))

    def move_to_left_of(self, node: Node, target: Target) -> Node:
        return self.move_to(node, target, POSITION_LEFT)

    def move_to_right_of(self, node: Node, target: Target) -> Node:
        return self.move_to(node, target, POSITION_RIGHT)

    def make_next_sibling_of(self, node: Node, target: Target) -> Node:
        return self.move_to_right_of(node, target)

    def make_sibling_of(self, node: Node, target: Target) -> Node:
        return self.move_to_right_of(node, target)

    def make_previous_sibling_of(self, node: Node, target: Target) -> Node:
        return self.move_to_left_of(node, target)

    #
    # Moving
    #

    def move_to(self, node: Node, target: Target, position: str) -> Node:
        """
        Move a node (with its subtree) relative to a target node.

        Args:
            node: Persisted node to move
            target: Target node handle or target key
            position: ``child``, ``left`` or ``right``

        Returns:
            The node handle, refreshed with its final bounds and depth

        Raises:
            InvalidStateError: If the node is not persisted
            InvalidArgumentError: If position is unknown
            UnresolvedTargetError: If the target cannot be found
            InvalidMoveError: If the target is the node or inside its subtree
        """
        self._refresh(node)
        resolved = self._resolve_target(target)
        if not self.validate_move(node, resolved, position):
            logger.debug(
                "Move of node %s to %s of %s is a no-op", node.id, position, resolved.id
            )
            return node

        with self.store.transaction():
            # Bounds that drive the update are re-read under the transaction
            self.store.reload(node)
            self.store.reload(resolved)
            if not self.validate_move(node, resolved, position):
                return node
            self.perform_move(node, resolved, position)

            self.store.reload(resolved)
            self.set_depth(node)
            self.refresh_descendant_depths(node)
            self.store.reload(node)
        return node

    def _refresh(self, node: Node) -> None:
        if node.exists:
            self.store.reload(node)

    def _resolve_target(self, target: Target) -> Optional[Node]:
        if target is None:
            return None
        if isinstance(target, Node):
            if not target.exists:
                return None
            fresh = self.store.fetch_by_id(target.id)
            return target.refresh_from(fresh) if fresh is not None else None
        return self.store.fetch_by_id(target)

    def validate_move(
        self, node: Node, target: Optional[Node], position: str
    ) -> bool:
        """
        Validate a proposed move.

        Returns:
            True if bounds need to change, False for a no-op move

        Raises:
            InvalidStateError, InvalidArgumentError, UnresolvedTargetError,
            InvalidMoveError: See ``move_to``
        """
        if not node.exists:
            raise InvalidStateError("A new node cannot be moved.", node_id=node.id)

        validate_position(position)

        if target is None:
            logger.warning("Move of node %s: target not resolved", node.id)
            if position in (POSITION_LEFT, POSITION_RIGHT):
                raise UnresolvedTargetError(
                    "Cannot resolve target node. "
                    f"This node cannot move any further to the {position}.",
                    position=position,
                )
            raise UnresolvedTargetError(
                "Cannot resolve target node.", position=position
            )

        if node.same_row(target):
            raise InvalidMoveError(
                "A node cannot be moved to itself.",
                node_id=node.id,
                target_id=target.id,
            )

        if is_inside_subtree(target, node):
            raise InvalidMoveError(
                "A node cannot be moved to a descendant of itself.",
                node_id=node.id,
                target_id=target.id,
            )

        return not is_noop_move(node, target, position)

    def perform_move(self, node: Node, target: Node, position: str) -> int:
        """
        Swap the two bound blocks of a move in a single UPDATE.

        Must run inside a transaction with freshly read node and target.

        Returns:
            Number of rows whose bounds were rewritten
        """
        a, b, c, d = sorted_boundaries(node, target, position)
        left_col = self.columns.left_column
        right_col = self.columns.right_column
        parent_col = self.columns.parent_column

        new_parent_id = target.id if position == POSITION_CHILD else target.parent_id

        def swap(column: str) -> Case:
            return (
                Case(default=column_ref(column))
                .when(between(column, a, b), plus(column, d - b))
                .when(between(column, c, d), plus(column, a - c))
            )

        parent_case = Case(default=column_ref(parent_col)).when(
            eq(self.columns.key_column, node.id), new_parent_id
        )

        affected = self.store.update(
            or_(between(left_col, a, d), between(right_col, a, d)),
            {
                left_col: swap(left_col),
                right_col: swap(right_col),
                parent_col: parent_case,
            },
        )
        logger.info(
            "Moved node %s to %s of %s: boundaries=(%s, %s, %s, %s), rows=%s",
            node.id,
            position,
            target.id,
            a,
            b,
            c,
            d,
            affected,
        )
        return affected

    #
    # Depth
    #

    def set_depth(self, node: Node) -> Node:
        """Recompute the node's depth from scratch and persist it."""
        with self.store.transaction():
            self.store.reload(node)
            level = self.queries.level(node)
            self.store.update(
                eq(self.columns.key_column, node.id),
                {self.columns.depth_column: level},
            )
            node.depth = level
        return node

    def refresh_descendant_depths(self, node: Node) -> int:
        """Recompute the depth of every descendant in one statement."""
        with self.store.transaction():
            predicate = self.queries.descendants(node).predicate
            updated = self.store.update(
                predicate,
                {self.columns.depth_column: self.queries.subtree_depth_expression()},
            )
        logger.debug("Refreshed depth of %s descendants of node %s", updated, node.id)
        return updated

    #
    # Deletion
    #

    def delete_descendants(self, node: Node) -> int:
        """
        Delete the node's descendants and close the gap in the numbering.

        The node's own row is left for the caller to delete.

        Returns:
            Number of descendant rows deleted
        """
        if not node.exists or not node.has_bounds():
            return 0

        left_col = self.columns.left_column
        right_col = self.columns.right_column
        with self.store.transaction():
            self.store.reload(node)
            left, right = node.left, node.right

            deleted = self.store.delete(and_(gt(left_col, left), lt(right_col, right)))

            diff = subtree_width(node)
            self.store.decrement(gt(left_col, right), left_col, diff)
            self.store.decrement(gt(right_col, right), right_col, diff)

        logger.info(
            "Deleted %s descendants of node %s, shifted bounds after %s by %s",
            deleted,
            node.id,
            right,
            diff,
        )
        return deleted
