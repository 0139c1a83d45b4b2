"""
Nested set behavior for a hosted table.

``NestedSetBehavior`` is what a host model talks to. It implements the four
lifecycle hooks the host invokes explicitly:

    on_before_create(node)  -> assign the next free bounds
    on_before_save(node)    -> capture a directly changed parent column
    on_after_save(node)     -> realign under the new parent, refresh depth
    on_before_delete(node)  -> delete descendants and close the gap

and exposes the tree readers and move operations per node:

    behavior.children(node).get()      # direct children
    behavior.descendants(node).get()   # whole subtree
    behavior.ancestors(node).get()     # path up to the root
    behavior.siblings(node).get()      # parent's other children
    behavior.leaves(node).get()        # subtree nodes without children
    behavior.descendants(node).get_nested()  # subtree as a forest

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from typing import List, Optional

from .bounds import is_descendant_of, is_inside_subtree, is_leaf_bounds
from .hierarchy import HierarchyNode, make_hierarchy
from .mutations import MutationEngine, Target
from .node import Node
from .queries import NestedSetQueries, NodeQuery
from .store import NodeStore


class NestedSetBehavior:
    """Tree operations and lifecycle hooks for nodes of one hosted table."""

    def __init__(self, store: NodeStore) -> None:
        self.store = store
        self.columns = store.columns
        self.queries = NestedSetQueries(store)
        self.engine = MutationEngine(store, self.queries)

    #
    # Lifecycle hooks
    #

    def on_before_create(self, node: Node) -> None:
        self.engine.set_default_left_and_right(node)

    def on_before_save(self, node: Node) -> None:
        self.engine.store_new_parent(node)

    def on_after_save(self, node: Node) -> None:
        self.engine.move_to_new_parent(node)
        self.engine.set_depth(node)

    def on_before_delete(self, node: Node) -> None:
        self.engine.delete_descendants(node)

    #
    # Named filters
    #

    def new_query(self) -> NodeQuery:
        return self.queries.new_query()

    def without_node(self, query: NodeQuery, node: Optional[Node]) -> NodeQuery:
        return self.queries.without_node(query, node)

    def without_self(self, query: NodeQuery, node: Node) -> NodeQuery:
        return self.queries.without_self(query, node)

    def without_root(self, query: NodeQuery, node: Node) -> NodeQuery:
        return self.queries.without_root(query, node)

    #
    # Relations and filters
    #

    def parent(self, node: Node) -> Optional[Node]:
        return self.queries.parent(node)

    def children(self, node: Node) -> NodeQuery:
        return self.queries.children(node)

    def descendants(self, node: Node, include_self: bool = False) -> NodeQuery:
        return self.queries.descendants(node, include_self)

    def descendants_and_self(self, node: Node) -> NodeQuery:
        return self.queries.descendants(node, include_self=True)

    def ancestors(self, node: Node, include_self: bool = False) -> NodeQuery:
        return self.queries.ancestors(node, include_self)

    def ancestors_and_self(self, node: Node) -> NodeQuery:
        return self.queries.ancestors(node, include_self=True)

    def siblings(self, node: Node, include_self: bool = False) -> NodeQuery:
        return self.queries.siblings(node, include_self)

    def siblings_and_self(self, node: Node) -> NodeQuery:
        return self.queries.siblings(node, include_self=True)

    def leaves(self, node: Node) -> NodeQuery:
        return self.queries.leaves(node)

    def get_left_sibling(self, node: Node) -> Optional[Node]:
        return self.queries.left_sibling(node)

    def get_right_sibling(self, node: Node) -> Optional[Node]:
        return self.queries.right_sibling(node)

    def get_root(self, node: Node) -> Optional[Node]:
        return self.queries.root(node)

    def get_level(self, node: Node) -> int:
        return self.queries.level(node)

    #
    # Checkers
    #

    def is_root(self, node: Node) -> bool:
        return node.parent_id is None

    def is_child(self, node: Node) -> bool:
        return not self.is_root(node)

    def is_leaf(self, node: Node) -> bool:
        """Persisted node whose bounds are adjacent."""
        return node.exists and is_leaf_bounds(node)

    def is_inside_subtree(self, node: Node, other: Node) -> bool:
        return is_inside_subtree(node, other)

    def is_descendant_of(self, node: Node, other: Node) -> bool:
        return is_descendant_of(node, other)

    #
    # Hierarchy
    #

    def get_nested(self, query: Optional[NodeQuery] = None) -> List[HierarchyNode]:
        """Run a query (the whole table by default) as a nested forest."""
        return (query or self.new_query()).get_nested()

    def make_hierarchy(self, nodes: List[Node]) -> List[HierarchyNode]:
        return make_hierarchy(nodes)

    #
    # Moving
    #

    def move_to(self, node: Node, target: Target, position: str) -> Node:
        return self.engine.move_to(node, target, position)

    def make_root(self, node: Node) -> Node:
        return self.engine.make_root(node)

    def make_child_of(self, node: Node, target: Target) -> Node:
        return self.engine.make_child_of(node, target)

    def move_left(self, node: Node) -> Node:
        return self.engine.move_left(node)

    def move_right(self, node: Node) -> Node:
        return self.engine.move_right(node)

    def move_to_left_of(self, node: Node, target: Target) -> Node:
        return self.engine.move_to_left_of(node, target)

    def move_to_right_of(self, node: Node, target: Target) -> Node:
        return self.engine.move_to_right_of(node, target)

    def make_next_sibling_of(self, node: Node, target: Target) -> Node:
        return self.engine.make_next_sibling_of(node, target)

    def make_sibling_of(self, node: Node, target: Target) -> Node:
        return self.engine.make_sibling_of(node, target)

    def make_previous_sibling_of(self, node: Node, target: Target) -> Node:
        return self.engine.make_previous_sibling_of(node, target)

    def delete_descendants(self, node: Node) -> int:
        return self.engine.delete_descendants(node)
