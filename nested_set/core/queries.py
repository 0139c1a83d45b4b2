"""
Query translator for nested set tables.

Turns a reference node's bounds into predicates over the hosted table.
Every query is ordered by the left bound, which yields preorder and is what
``make_hierarchy`` relies on.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from typing import List, Optional

from .bounds import require_bounds
from .hierarchy import HierarchyNode, make_hierarchy
from .node import Node
from .sql import (
    ALWAYS,
    Predicate,
    Raw,
    and_,
    column_difference,
    eq,
    ge,
    is_null,
    le,
    lt,
    ne,
    quote_identifier,
)
from .store import NodeStore


class NodeQuery:
    """Immutable, chainable query over one hosted table.

    Holds a predicate and runs it against the store only when one of
    ``get``, ``first``, ``count`` or ``get_nested`` is called.
    """

    def __init__(
        self,
        store: NodeStore,
        predicate: Predicate = ALWAYS,
        order_by: Optional[str] = None,
    ) -> None:
        self.store = store
        self.predicate = predicate
        self.order_by = order_by or store.columns.left_column

    def where(self, predicate: Predicate) -> "NodeQuery":
        """Return a new query narrowed by an extra predicate."""
        return NodeQuery(self.store, and_(self.predicate, predicate), self.order_by)

    def without_node(self, node: Optional[Node]) -> "NodeQuery":
        """Exclude one stored node; unsaved or missing nodes exclude nothing."""
        if node is None or node.id is None:
            return self
        return self.where(ne(self.store.columns.key_column, node.id))

    def get(self) -> List[Node]:
        return self.store.query(self.predicate, order_by=self.order_by)

    def first(self) -> Optional[Node]:
        nodes = self.store.query(self.predicate, order_by=self.order_by, limit=1)
        return nodes[0] if nodes else None

    def count(self) -> int:
        return self.store.count(self.predicate)

    def get_nested(self) -> List[HierarchyNode]:
        """Run the query and materialize the result as a forest."""
        return make_hierarchy(self.get())

    def __iter__(self):
        return iter(self.get())


class NestedSetQueries:
    """Builds tree queries for nodes of one hosted table."""

    def __init__(self, store: NodeStore) -> None:
        self.store = store
        self.columns = store.columns

    def new_query(self) -> NodeQuery:
        """All rows of the table, ordered by left bound."""
        return NodeQuery(self.store)

    #
    # Named filters
    #

    def without_node(self, query: NodeQuery, node: Optional[Node]) -> NodeQuery:
        return query.without_node(node)

    def without_self(self, query: NodeQuery, node: Node) -> NodeQuery:
        return query.without_node(node)

    def without_root(self, query: NodeQuery, node: Node) -> NodeQuery:
        """Exclude the root of the tree the node belongs to."""
        return query.without_node(self.root(node))

    #
    # Filters
    #

    def descendants(self, node: Node, include_self: bool = False) -> NodeQuery:
        """All nodes nested inside the node's interval."""
        left, right = require_bounds(node)
        query = self.new_query().where(
            and_(ge(self.columns.left_column, left), lt(self.columns.left_column, right))
        )
        return query if include_self else query.without_node(node)

    def ancestors(self, node: Node, include_self: bool = False) -> NodeQuery:
        """All nodes whose interval contains the node's interval."""
        left, right = require_bounds(node)
        query = self.new_query().where(
            and_(le(self.columns.left_column, left), ge(self.columns.right_column, right))
        )
        return query if include_self else query.without_node(node)

    def siblings(self, node: Node, include_self: bool = False) -> NodeQuery:
        """All nodes sharing the node's parent (all roots for a root)."""
        query = self.new_query().where(eq(self.columns.parent_column, node.parent_id))
        return query if include_self else query.without_node(node)

    def children(self, node: Node) -> NodeQuery:
        """Immediate children of the node."""
        return self.new_query().where(eq(self.columns.parent_column, node.id))

    def leaves(self, node: Node) -> NodeQuery:
        """Descendants without children."""
        return self.descendants(node).where(
            column_difference(self.columns.right_column, self.columns.left_column, 1)
        )

    def left_sibling(self, node: Node) -> Optional[Node]:
        """Sibling whose right bound sits immediately before the node's left."""
        left, _ = require_bounds(node)
        return (
            self.siblings(node)
            .where(eq(self.columns.right_column, left - 1))
            .first()
        )

    def right_sibling(self, node: Node) -> Optional[Node]:
        """Sibling whose left bound sits immediately after the node's right."""
        _, right = require_bounds(node)
        return (
            self.siblings(node)
            .where(eq(self.columns.left_column, right + 1))
            .first()
        )

    def parent(self, node: Node) -> Optional[Node]:
        return self.store.fetch_by_id(node.parent_id)

    #
    # Getters
    #

    def root(self, node: Node) -> Optional[Node]:
        """
        Root of the tree containing the node.

        For a node that is not persisted yet the stored parent chain is
        walked instead; such a node without a parent is its own root.
        """
        if node.exists:
            return (
                self.ancestors(node, include_self=True)
                .where(is_null(self.columns.parent_column))
                .first()
            )

        parent = self.store.fetch_by_id(node.parent_id)
        if parent is not None:
            return self.root(parent)
        return node

    def level(self, node: Node) -> int:
        """Depth computed from scratch: 0 for roots, else the ancestor count."""
        if node.parent_id is None:
            return 0
        return self.ancestors(node).count()

    def subtree_depth_expression(self) -> Raw:
        """Correlated expression computing each row's strict ancestor count."""
        table = quote_identifier(self.columns.table)
        left = quote_identifier(self.columns.left_column)
        right = quote_identifier(self.columns.right_column)
        return Raw(
            f"(SELECT COUNT(*) FROM {table} AS anc "
            f"WHERE anc.{left} < {table}.{left} AND anc.{right} > {table}.{right})"
        )
