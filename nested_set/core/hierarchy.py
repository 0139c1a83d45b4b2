"""
Hierarchy materialization.

Turns a left-ordered (preorder) list of nodes into a forest of
``HierarchyNode`` objects and back.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from .bounds import is_leaf_bounds
from .node import Node


@dataclass
class HierarchyNode:
    """A node with its immediate children attached.

    Attributes:
        node: The stored node
        children: Immediate children in left order (empty for leaves)
    """

    node: Node
    children: List["HierarchyNode"] = field(default_factory=list)

    @property
    def id(self) -> Any:
        return self.node.id

    def walk(self) -> Iterator[Node]:
        """Yield this node and its descendants in preorder."""
        yield self.node
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        result = self.node.to_dict()
        result["children"] = [child.to_dict() for child in self.children]
        return result


def _collect(nodes: Sequence[Node], index: int) -> Tuple[List[HierarchyNode], int]:
    """Consume one sibling run starting at index; return it and the next index."""
    collection: List[HierarchyNode] = []
    while index < len(nodes):
        current = nodes[index]
        index += 1
        item = HierarchyNode(current)
        collection.append(item)

        if not is_leaf_bounds(current):
            item.children, index = _collect(nodes, index)

        if index < len(nodes) and nodes[index].parent_id != current.parent_id:
            return collection, index
    return collection, index


def make_hierarchy(nodes: Sequence[Node]) -> List[HierarchyNode]:
    """
    Build a forest from nodes in preorder.

    Every non-leaf node claims the nodes that follow it as children until a
    node with a different parent appears. The input must already be in valid
    preorder (ordered by left bound, subtrees complete); other input yields
    undefined nesting.

    Args:
        nodes: Nodes ordered by left bound

    Returns:
        Top-level hierarchy nodes
    """
    forest: List[HierarchyNode] = []
    index = 0
    while index < len(nodes):
        run, index = _collect(nodes, index)
        forest.extend(run)
    return forest


def flatten_hierarchy(forest: Sequence[HierarchyNode]) -> List[Node]:
    """Preorder traversal of a forest back into a flat node list."""
    result: List[Node] = []
    for item in forest:
        result.extend(item.walk())
    return result
