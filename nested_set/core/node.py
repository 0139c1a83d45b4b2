"""
Node object model.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .config import ColumnConfig


class _Unchanged:
    """Marker for "parent column was not modified" in a pending realignment."""

    def __repr__(self) -> str:
        return "UNCHANGED"


UNCHANGED = _Unchanged()


@dataclass(eq=False)
class Node:
    """One row of a hosted nested set table.

    Attributes:
        id: Store-assigned key (None until inserted)
        parent_id: Parent key, None for a tree root
        left: Left bound
        right: Right bound
        depth: Number of strict ancestors
        payload: Opaque payload columns
        exists: Whether the row is persisted
    """

    id: Optional[int] = None
    parent_id: Optional[int] = None
    left: Optional[int] = None
    right: Optional[int] = None
    depth: Optional[int] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    exists: bool = False
    # Parent value last read from or written to the store
    original_parent_id: Optional[int] = field(default=None, repr=False)
    # Target captured by the before-save hook for the after-save hook
    pending_parent: Any = field(default=UNCHANGED, repr=False)

    @classmethod
    def from_db_row(cls, row: Dict[str, Any], columns: ColumnConfig) -> "Node":
        """Create Node from database row.

        Args:
            row: Database row as dictionary
            columns: Column naming of the hosted table

        Returns:
            Persisted node instance
        """
        parent_id = row.get(columns.parent_column)
        return cls(
            id=row.get(columns.key_column),
            parent_id=parent_id,
            left=row.get(columns.left_column),
            right=row.get(columns.right_column),
            depth=row.get(columns.depth_column),
            payload={name: row.get(name) for name in columns.payload_columns},
            exists=True,
            original_parent_id=parent_id,
        )

    def refresh_from(self, other: "Node") -> "Node":
        """Copy stored attributes of another handle onto this one."""
        self.id = other.id
        self.parent_id = other.parent_id
        self.left = other.left
        self.right = other.right
        self.depth = other.depth
        self.payload = dict(other.payload)
        self.exists = other.exists
        self.original_parent_id = other.original_parent_id
        return self

    def sync_original(self) -> None:
        """Mark the current parent value as the stored one."""
        self.original_parent_id = self.parent_id

    def is_parent_dirty(self) -> bool:
        """Whether the parent column differs from the stored value.

        For a row that is not persisted yet, a declared parent counts as a
        change and a missing one does not.
        """
        if not self.exists:
            return self.parent_id is not None
        return self.parent_id != self.original_parent_id

    def has_bounds(self) -> bool:
        return self.left is not None and self.right is not None

    def same_row(self, other: Optional["Node"]) -> bool:
        """Whether both handles refer to the same stored row."""
        return other is not None and self.id is not None and self.id == other.id

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary for JSON output."""
        result = {
            "id": self.id,
            "parent_id": self.parent_id,
            "left": self.left,
            "right": self.right,
            "depth": self.depth,
        }
        result.update(self.payload)
        return result
