"""
Nested Set Index

Hierarchical data in a relational table using nested set (modified preorder
tree traversal) bounds: tree queries from two integers per row, and moves,
inserts and deletes that keep the numbering consistent.

Can be used as a library or via CLI commands.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

__version__ = "1.0.0"
__author__ = "Vasiliy Zdanovskiy"
__email__ = "vasilyvz@gmail.com"

from .core import (
    ColumnConfig,
    HierarchyNode,
    InvalidArgumentError,
    InvalidMoveError,
    InvalidStateError,
    MutationEngine,
    NestedSetBehavior,
    NestedSetConfig,
    NestedSetError,
    NestedSetQueries,
    NestedSetTable,
    Node,
    NodeStore,
    SQLNodeStore,
    StoreConfig,
    UnresolvedTargetError,
    make_hierarchy,
)

__all__ = [
    "ColumnConfig",
    "HierarchyNode",
    "InvalidArgumentError",
    "InvalidMoveError",
    "InvalidStateError",
    "MutationEngine",
    "NestedSetBehavior",
    "NestedSetConfig",
    "NestedSetError",
    "NestedSetQueries",
    "NestedSetTable",
    "Node",
    "NodeStore",
    "SQLNodeStore",
    "StoreConfig",
    "UnresolvedTargetError",
    "make_hierarchy",
]
