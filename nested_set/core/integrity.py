"""
Nested set integrity checks.

Verifies the structural invariants of a hosted table in a single preorder
pass:

- every node has ``left < right``;
- all left/right values together are exactly ``1..2n`` (tight packing);
- intervals either nest or are disjoint (no partial overlap);
- each node's parent column names its nearest enclosing interval
  (None for roots);
- each node's depth equals the number of enclosing intervals.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .node import Node
from .store import NodeStore

MAX_REPORTED_PROBLEMS = 50


@dataclass(frozen=True)
class IntegrityReport:
    """
    Result of an integrity check.

    Attributes:
        ok: Whether every invariant holds.
        node_count: Number of nodes inspected.
        problems: Human-readable descriptions of violations (capped).
    """

    ok: bool
    node_count: int
    problems: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        if self.ok:
            return f"OK: {self.node_count} nodes"
        return f"{len(self.problems)} problem(s): " + "; ".join(self.problems[:5])


def check_nodes(nodes: Sequence[Node]) -> IntegrityReport:
    """
    Check invariants over a full table snapshot.

    Args:
        nodes: Every node of the table, in any order

    Returns:
        IntegrityReport
    """
    problems: List[str] = []

    def report(text: str) -> None:
        if len(problems) < MAX_REPORTED_PROBLEMS:
            problems.append(text)

    bounded = []
    for node in nodes:
        if not node.has_bounds():
            report(f"node {node.id} has no bounds")
        elif node.left >= node.right:
            report(f"node {node.id} has left {node.left} >= right {node.right}")
        else:
            bounded.append(node)

    values = sorted(v for node in bounded for v in (node.left, node.right))
    expected = list(range(1, 2 * len(bounded) + 1))
    if values != expected:
        duplicates = sorted(v for v, n in Counter(values).items() if n > 1)
        missing = sorted(set(expected) - set(values))
        report(
            "bounds are not tightly packed"
            f" (duplicates={duplicates[:10]}, missing={missing[:10]})"
        )

    stack: List[Node] = []
    for node in sorted(bounded, key=lambda n: n.left):
        while stack and stack[-1].right < node.left:
            stack.pop()
        enclosing = stack[-1] if stack else None

        if enclosing is not None and node.right > enclosing.right:
            report(
                f"node {node.id} ({node.left}, {node.right}) partially overlaps "
                f"node {enclosing.id} ({enclosing.left}, {enclosing.right})"
            )

        expected_parent = enclosing.id if enclosing is not None else None
        if node.parent_id != expected_parent:
            report(
                f"node {node.id} has parent {node.parent_id}, "
                f"enclosing interval belongs to {expected_parent}"
            )

        if node.depth != len(stack):
            report(f"node {node.id} has depth {node.depth}, expected {len(stack)}")

        stack.append(node)

    return IntegrityReport(ok=not problems, node_count=len(nodes), problems=tuple(problems))


def check_store(store: NodeStore) -> IntegrityReport:
    """Check invariants of every row currently in the store."""
    return check_nodes(store.fetch_ordered_by(store.columns.left_column))
