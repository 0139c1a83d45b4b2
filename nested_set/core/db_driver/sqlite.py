"""
SQLite database driver.

The connection runs in autocommit mode; transactions are opened explicitly
with ``BEGIN IMMEDIATE`` so the write lock is taken before any boundary is
read.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .base import BaseDatabaseDriver
from .exceptions import DriverConnectionError, DriverOperationError, TransactionError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


class SQLiteDriver(BaseDatabaseDriver):
    """SQLite database driver."""

    def __init__(self) -> None:
        """Initialize SQLite driver."""
        self.conn: Optional[sqlite3.Connection] = None
        self.db_path: Optional[Path] = None

    def connect(self, config: Dict[str, Any]) -> None:
        """
        Establish SQLite connection.

        Args:
            config: Configuration dict with 'path' key pointing to database file
                (``:memory:`` opens a private in-memory database) and optional
                'timeout' in seconds for lock waits

        Raises:
            DriverConnectionError: If connection fails
        """
        if "path" not in config:
            raise DriverConnectionError("SQLite driver requires 'path' in config")

        try:
            if str(config["path"]) == MEMORY_PATH:
                target = MEMORY_PATH
                self.db_path = None
            else:
                self.db_path = Path(config["path"]).resolve()
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                target = str(self.db_path)
            logger.info("SQLite driver connecting to db_path=%s", target)

            self.conn = sqlite3.connect(
                target,
                timeout=float(config.get("timeout", 30.0)),
                isolation_level=None,
                check_same_thread=False,
            )
            self.conn.row_factory = sqlite3.Row
            # Enable WAL mode for better reader concurrency
            if self.db_path is not None:
                try:
                    self.conn.execute("PRAGMA journal_mode = WAL")
                except sqlite3.DatabaseError as e:
                    logger.warning(
                        f"Failed to enable WAL mode for database {self.db_path}: {e}. "
                        "Continuing without WAL mode."
                    )
        except sqlite3.Error as e:
            raise DriverConnectionError(f"Failed to connect to database: {e}") from e

    def disconnect(self) -> None:
        """Close SQLite connection, rolling back anything left open."""
        if self.conn:
            if self.conn.in_transaction:
                logger.warning("Closing connection with an open transaction; rolling back")
                self._cursor().execute("ROLLBACK")
            self.conn.close()
            self.conn = None

    def _cursor(self) -> sqlite3.Cursor:
        if not self.conn:
            raise DriverOperationError("Database connection not established")
        return self.conn.cursor()

    def execute(
        self, sql: str, params: Optional[Tuple[Any, ...]] = None
    ) -> Dict[str, Any]:
        """
        Execute SQL statement.

        Args:
            sql: SQL statement
            params: Optional parameters for parameterized query

        Returns:
            Dictionary with ``affected_rows`` and ``lastrowid``

        Raises:
            DriverOperationError: If the statement fails
        """
        cursor = self._cursor()
        try:
            cursor.execute(sql, params or ())
        except sqlite3.Error as e:
            raise DriverOperationError(f"Failed to execute statement: {e}") from e
        return {"affected_rows": cursor.rowcount, "lastrowid": cursor.lastrowid}

    def fetchone(
        self, sql: str, params: Optional[Tuple[Any, ...]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Execute SELECT query and return first row.

        Args:
            sql: SQL SELECT statement
            params: Optional parameters for parameterized query

        Returns:
            Dictionary with column names as keys, or None if no rows
        """
        cursor = self._cursor()
        try:
            cursor.execute(sql, params or ())
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise DriverOperationError(f"Failed to fetch row: {e}") from e
        return dict(row) if row else None

    def fetchall(
        self, sql: str, params: Optional[Tuple[Any, ...]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute SELECT query and return all rows.

        Args:
            sql: SQL SELECT statement
            params: Optional parameters for parameterized query

        Returns:
            List of dictionaries with column names as keys
        """
        cursor = self._cursor()
        try:
            cursor.execute(sql, params or ())
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise DriverOperationError(f"Failed to fetch rows: {e}") from e
        return [dict(row) for row in rows]

    def in_transaction(self) -> bool:
        """Return True while a transaction is open on the connection."""
        return bool(self.conn is not None and self.conn.in_transaction)

    def begin_transaction(self) -> None:
        """Begin an immediate (write-locking) transaction."""
        if self.in_transaction():
            raise TransactionError("Transaction already active")
        try:
            self._cursor().execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise TransactionError(f"Failed to begin transaction: {e}") from e

    def commit_transaction(self) -> None:
        """Commit current transaction."""
        if not self.in_transaction():
            raise TransactionError("No active transaction")
        try:
            self._cursor().execute("COMMIT")
        except sqlite3.Error as e:
            raise TransactionError(f"Failed to commit transaction: {e}") from e

    def rollback_transaction(self) -> None:
        """Rollback current transaction."""
        if not self.in_transaction():
            raise TransactionError("No active transaction")
        try:
            self._cursor().execute("ROLLBACK")
        except sqlite3.Error as e:
            raise TransactionError(f"Failed to rollback transaction: {e}") from e
