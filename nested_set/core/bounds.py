"""
Boundary arithmetic for nested set moves.

Pure functions over node bounds; no store access. A move of ``node``
relative to ``target`` is described by four sorted boundaries ``a <= b <= c
<= d``: the blocks ``[a, b]`` and ``[c, d]`` trade places, which re-nests
the node's subtree at its new location while keeping the numbering tight.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from typing import Optional, Tuple

from .constants import MOVE_POSITIONS, POSITION_CHILD, POSITION_LEFT, POSITION_RIGHT
from .exceptions import InvalidArgumentError, InvalidStateError
from .node import Node


def require_bounds(node: Node) -> Tuple[int, int]:
    """
    Return ``(left, right)`` of a node.

    Raises:
        InvalidStateError: If the node has no bounds yet
    """
    if not node.has_bounds():
        raise InvalidStateError(
            "Node has no nested set bounds; it must be saved first.",
            node_id=node.id,
        )
    return node.left, node.right


def validate_position(position: str) -> str:
    """
    Check a move position.

    Raises:
        InvalidArgumentError: If position is not child, left or right
    """
    if position not in MOVE_POSITIONS:
        raise InvalidArgumentError(
            "Position should be either child, left, right. "
            f'Supplied position is "{position}".',
            argument="position",
        )
    return position


def primary_boundary(node: Node, target: Node, position: str) -> int:
    """
    Boundary at which the node's block is inserted.

    ``target.right`` for child, ``target.left`` for left and
    ``target.right + 1`` for right. A value past the node's own right edge is
    lowered by one because it is measured in the numbering that still
    contains the node.
    """
    validate_position(position)
    _, node_right = require_bounds(node)
    target_left, target_right = require_bounds(target)

    if position == POSITION_CHILD:
        boundary = target_right
    elif position == POSITION_LEFT:
        boundary = target_left
    else:
        boundary = target_right + 1

    return boundary - 1 if boundary > node_right else boundary


def other_boundary(node: Node, target: Node, position: str) -> int:
    """Edge of the node's own block facing the primary boundary."""
    node_left, node_right = require_bounds(node)
    if primary_boundary(node, target, position) > node_right:
        return node_right + 1
    return node_left - 1


def sorted_boundaries(
    node: Node, target: Node, position: str
) -> Tuple[int, int, int, int]:
    """Return the four move boundaries ``(a, b, c, d)`` in ascending order."""
    node_left, node_right = require_bounds(node)
    boundaries = sorted(
        [
            node_left,
            node_right,
            primary_boundary(node, target, position),
            other_boundary(node, target, position),
        ]
    )
    return boundaries[0], boundaries[1], boundaries[2], boundaries[3]


def is_noop_move(node: Node, target: Node, position: str) -> bool:
    """Whether the primary boundary coincides with the node's own edge."""
    boundary = primary_boundary(node, target, position)
    return boundary == node.right or boundary == node.left


def swap_shift(value: int, boundaries: Tuple[int, int, int, int]) -> int:
    """
    New value of one bound under the block swap.

    Values in ``[a, b]`` move up by ``d - b``, values in ``[c, d]`` move down
    by ``c - a``, anything else is unchanged.
    """
    a, b, c, d = boundaries
    if a <= value <= b:
        return value + d - b
    if c <= value <= d:
        return value + a - c
    return value


def next_free_bounds(max_right: Optional[int]) -> Tuple[int, int]:
    """Bounds for a new row appended after the rightmost existing bound."""
    highest = max_right or 0
    return highest + 1, highest + 2


def subtree_width(node: Node) -> int:
    """Number of bound values occupied by the node's subtree."""
    left, right = require_bounds(node)
    return right - left + 1


def is_leaf_bounds(node: Node) -> bool:
    return node.has_bounds() and node.right - node.left == 1


def is_inside_subtree(node: Node, other: Node) -> bool:
    """Whether node's interval lies within other's interval (self included)."""
    node_left, node_right = require_bounds(node)
    other_left, other_right = require_bounds(other)
    return (
        node_left >= other_left
        and node_left <= other_right
        and node_right >= other_left
        and node_right <= other_right
    )


def is_descendant_of(node: Node, other: Node) -> bool:
    """Strict descendant test: node.left falls inside other's interval."""
    node_left, _ = require_bounds(node)
    other_left, other_right = require_bounds(other)
    return other_left < node_left < other_right


__all__ = [
    "POSITION_CHILD",
    "POSITION_LEFT",
    "POSITION_RIGHT",
    "require_bounds",
    "validate_position",
    "primary_boundary",
    "other_boundary",
    "sorted_boundaries",
    "is_noop_move",
    "swap_shift",
    "next_free_bounds",
    "subtree_width",
    "is_leaf_bounds",
    "is_inside_subtree",
    "is_descendant_of",
]
