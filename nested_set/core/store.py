"""
Node store: the transactional repository the nested set core runs against.

``NodeStore`` is the narrow interface the mutation engine and the query
translator depend on. ``SQLNodeStore`` implements it on top of a database
driver; every statement is built from the table's ``ColumnConfig``.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .config import ColumnConfig, StoreConfig
from .db_driver import BaseDatabaseDriver, TransactionError, create_driver
from .exceptions import InvalidStateError
from .node import Node
from .schema import build_schema_sql
from .sql import ALWAYS, Predicate, compile_value, eq, plus, quote_identifier

logger = logging.getLogger(__name__)


class NodeStore(ABC):
    """Transactional repository of nodes for one hosted table."""

    def __init__(self, columns: ColumnConfig) -> None:
        self.columns = columns

    @abstractmethod
    def fetch_by_id(self, node_id: Any) -> Optional[Node]:
        """Return the stored node with this key, or None."""
        raise NotImplementedError

    @abstractmethod
    def query(
        self,
        predicate: Predicate = ALWAYS,
        order_by: Optional[str] = None,
        direction: str = "asc",
        limit: Optional[int] = None,
    ) -> List[Node]:
        """Return nodes matching a predicate."""
        raise NotImplementedError

    @abstractmethod
    def count(self, predicate: Predicate = ALWAYS) -> int:
        """Count nodes matching a predicate."""
        raise NotImplementedError

    @abstractmethod
    def update(self, predicate: Predicate, assignments: Dict[str, Any]) -> int:
        """Apply assignments (values or expressions) to matching rows.

        All assignments of one call are evaluated against the row values as
        they were before the call.

        Returns:
            Number of affected rows
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, predicate: Predicate) -> int:
        """Delete matching rows and return their number."""
        raise NotImplementedError

    @abstractmethod
    def insert(self, node: Node) -> Node:
        """Insert a new row for the node and mark it persisted."""
        raise NotImplementedError

    @abstractmethod
    def write(self, node: Node) -> Node:
        """Write the node's parent and payload columns to its row.

        Bounds and depth are not written; they are owned by the mutation
        engine.
        """
        raise NotImplementedError

    @abstractmethod
    def transaction(self):
        """Context manager: commit on normal exit, roll back and re-raise on error."""
        raise NotImplementedError

    def fetch_ordered_by(
        self, column: str, direction: str = "asc", limit: Optional[int] = None
    ) -> List[Node]:
        """Return all nodes ordered by one column."""
        return self.query(ALWAYS, order_by=column, direction=direction, limit=limit)

    def decrement(self, predicate: Predicate, column: str, amount: int) -> int:
        """Subtract amount from column on matching rows."""
        return self.update(predicate, {column: plus(column, -amount)})

    def reload(self, node: Node) -> Node:
        """
        Refresh a node handle from its stored row.

        Raises:
            InvalidStateError: If the node is not persisted or its row is gone
        """
        if not node.exists or node.id is None:
            raise InvalidStateError("Cannot reload a node that was never saved.")
        fresh = self.fetch_by_id(node.id)
        if fresh is None:
            raise InvalidStateError(
                f"Node {node.id} no longer exists in the store.", node_id=node.id
            )
        return node.refresh_from(fresh)


class SQLNodeStore(NodeStore):
    """NodeStore backed by a SQL database driver."""

    def __init__(self, driver: BaseDatabaseDriver, columns: ColumnConfig) -> None:
        """
        Initialize store.

        Args:
            driver: Connected database driver
            columns: Column naming of the hosted table
        """
        super().__init__(columns)
        self.driver = driver
        self._transaction_depth = 0
        self._table = quote_identifier(columns.table)
        self._select_list = ", ".join(
            quote_identifier(name) for name in columns.all_columns
        )

    @classmethod
    def from_config(
        cls, store_config: StoreConfig, columns: ColumnConfig
    ) -> "SQLNodeStore":
        """Create a store with a registered driver."""
        driver = create_driver(store_config.type, store_config.driver_config())
        return cls(driver, columns)

    def create_schema(self) -> None:
        """Create the hosted table and its indexes if missing."""
        self.driver.create_schema(build_schema_sql(self.columns))
        logger.info("Schema ready for table %s", self.columns.table)

    def close(self) -> None:
        """Close database connection."""
        if self.driver:
            self.driver.disconnect()

    def __enter__(self) -> "SQLNodeStore":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _rows_to_nodes(self, rows: List[Dict[str, Any]]) -> List[Node]:
        return [Node.from_db_row(row, self.columns) for row in rows]

    def fetch_by_id(self, node_id: Any) -> Optional[Node]:
        if node_id is None:
            return None
        nodes = self.query(eq(self.columns.key_column, node_id), limit=1)
        return nodes[0] if nodes else None

    def query(
        self,
        predicate: Predicate = ALWAYS,
        order_by: Optional[str] = None,
        direction: str = "asc",
        limit: Optional[int] = None,
    ) -> List[Node]:
        where_sql, params = predicate.compile()
        sql = f"SELECT {self._select_list} FROM {self._table} WHERE {where_sql}"
        if order_by:
            if direction.lower() not in ("asc", "desc"):
                raise ValueError(f"Invalid order direction: {direction}")
            sql += f" ORDER BY {quote_identifier(order_by)} {direction.upper()}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return self._rows_to_nodes(self.driver.fetchall(sql, params))

    def count(self, predicate: Predicate = ALWAYS) -> int:
        where_sql, params = predicate.compile()
        row = self.driver.fetchone(
            f"SELECT COUNT(*) AS n FROM {self._table} WHERE {where_sql}", params
        )
        return int(row["n"]) if row else 0

    def update(self, predicate: Predicate, assignments: Dict[str, Any]) -> int:
        if not assignments:
            return 0
        set_parts: List[str] = []
        params: List[Any] = []
        for column, value in assignments.items():
            value_sql, value_params = compile_value(value)
            set_parts.append(f"{quote_identifier(column)} = {value_sql}")
            params.extend(value_params)
        where_sql, where_params = predicate.compile()
        params.extend(where_params)
        sql = f"UPDATE {self._table} SET {', '.join(set_parts)} WHERE {where_sql}"
        result = self.driver.execute(sql, tuple(params))
        return result["affected_rows"]

    def delete(self, predicate: Predicate) -> int:
        where_sql, params = predicate.compile()
        result = self.driver.execute(
            f"DELETE FROM {self._table} WHERE {where_sql}", params
        )
        return result["affected_rows"]

    def _row_values(self, node: Node) -> Dict[str, Any]:
        values = {self.columns.parent_column: node.parent_id}
        for name in self.columns.payload_columns:
            values[name] = node.payload.get(name)
        return values

    def insert(self, node: Node) -> Node:
        values = self._row_values(node)
        values[self.columns.left_column] = node.left
        values[self.columns.right_column] = node.right
        values[self.columns.depth_column] = node.depth
        if node.id is not None:
            values[self.columns.key_column] = node.id
        column_sql = ", ".join(quote_identifier(name) for name in values)
        placeholders = ", ".join("?" for _ in values)
        result = self.driver.execute(
            f"INSERT INTO {self._table} ({column_sql}) VALUES ({placeholders})",
            tuple(values.values()),
        )
        if node.id is None:
            node.id = result["lastrowid"]
        node.exists = True
        node.sync_original()
        return node

    def write(self, node: Node) -> Node:
        if not node.exists:
            raise InvalidStateError("Cannot write a node that was never inserted.")
        self.update(eq(self.columns.key_column, node.id), self._row_values(node))
        node.sync_original()
        return node

    def in_transaction(self) -> bool:
        return self._transaction_depth > 0

    @contextmanager
    def transaction(self) -> Iterator["SQLNodeStore"]:
        """
        Run a block atomically.

        The outermost level begins and commits a database transaction; nested
        levels run inside savepoints so an inner failure only undoes the inner
        block before re-raising.
        """
        depth = self._transaction_depth
        savepoint = f"nested_set_sp_{depth}"
        if depth == 0:
            self.driver.begin_transaction()
        else:
            self.driver.create_savepoint(savepoint)
        self._transaction_depth += 1
        try:
            yield self
        except BaseException:
            self._transaction_depth -= 1
            if depth == 0:
                logger.debug("Rolling back transaction")
                self.driver.rollback_transaction()
            else:
                logger.debug("Rolling back to savepoint %s", savepoint)
                self.driver.rollback_to_savepoint(savepoint)
            raise
        self._transaction_depth -= 1
        if depth > 0:
            self.driver.release_savepoint(savepoint)
            return
        try:
            self.driver.commit_transaction()
        except TransactionError:
            if self.driver.in_transaction():
                logger.warning("Commit failed, rolling back transaction")
                self.driver.rollback_transaction()
            raise


def open_store(
    store_config: StoreConfig, columns: Optional[ColumnConfig] = None
) -> SQLNodeStore:
    """Open a store and make sure the hosted table exists."""
    store = SQLNodeStore.from_config(store_config, columns or ColumnConfig())
    store.create_schema()
    return store


__all__ = ["NodeStore", "SQLNodeStore", "open_store"]

