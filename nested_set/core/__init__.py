"""
Core nested set package.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from .behavior import NestedSetBehavior
from .config import ColumnConfig, NestedSetConfig, StoreConfig, load_config
from .constants import POSITION_CHILD, POSITION_LEFT, POSITION_RIGHT
from .exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    InvalidMoveError,
    InvalidStateError,
    NestedSetError,
    UnresolvedTargetError,
)
from .hierarchy import HierarchyNode, flatten_hierarchy, make_hierarchy
from .integrity import IntegrityReport, check_nodes, check_store
from .mutations import MutationEngine
from .node import Node
from .queries import NestedSetQueries, NodeQuery
from .store import NodeStore, SQLNodeStore, open_store
from .table import NestedSetTable

__all__ = [
    "NestedSetBehavior",
    "ColumnConfig",
    "NestedSetConfig",
    "StoreConfig",
    "load_config",
    "POSITION_CHILD",
    "POSITION_LEFT",
    "POSITION_RIGHT",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidMoveError",
    "InvalidStateError",
    "NestedSetError",
    "UnresolvedTargetError",
    "HierarchyNode",
    "flatten_hierarchy",
    "make_hierarchy",
    "IntegrityReport",
    "check_nodes",
    "check_store",
    "MutationEngine",
    "Node",
    "NestedSetQueries",
    "NodeQuery",
    "NodeStore",
    "SQLNodeStore",
    "open_store",
    "NestedSetTable",
]
