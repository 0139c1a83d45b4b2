"""
Base database driver interface.

Drivers execute parameterised SQL and own the transaction primitives
(begin/commit/rollback and savepoints). Everything above the driver speaks
in rows as dictionaries.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple


class BaseDatabaseDriver(ABC):
    """Base class for database drivers."""

    @abstractmethod
    def connect(self, config: Dict[str, Any]) -> None:
        """Establish database connection.

        Args:
            config: Driver-specific configuration

        Raises:
            DriverConnectionError: If connection fails
        """
        raise NotImplementedError

    @abstractmethod
    def disconnect(self) -> None:
        """Close database connection."""
        raise NotImplementedError

    @abstractmethod
    def execute(
        self, sql: str, params: Optional[Tuple[Any, ...]] = None
    ) -> Dict[str, Any]:
        """Execute SQL statement (INSERT, UPDATE, DELETE, CREATE, etc.).

        Args:
            sql: SQL statement
            params: Optional parameters for parameterized query

        Returns:
            Dictionary with ``affected_rows`` and ``lastrowid``

        Raises:
            DriverOperationError: If operation fails
        """
        raise NotImplementedError

    @abstractmethod
    def fetchone(
        self, sql: str, params: Optional[Tuple[Any, ...]] = None
    ) -> Optional[Dict[str, Any]]:
        """Execute SELECT query and return first row.

        Args:
            sql: SQL SELECT statement
            params: Optional parameters for parameterized query

        Returns:
            Dictionary with column names as keys, or None if no rows
        """
        raise NotImplementedError

    @abstractmethod
    def fetchall(
        self, sql: str, params: Optional[Tuple[Any, ...]] = None
    ) -> List[Dict[str, Any]]:
        """Execute SELECT query and return all rows.

        Args:
            sql: SQL SELECT statement
            params: Optional parameters for parameterized query

        Returns:
            List of dictionaries with column names as keys
        """
        raise NotImplementedError

    @abstractmethod
    def begin_transaction(self) -> None:
        """Begin database transaction.

        Raises:
            TransactionError: If a transaction is already active or cannot start
        """
        raise NotImplementedError

    @abstractmethod
    def commit_transaction(self) -> None:
        """Commit current transaction.

        Raises:
            TransactionError: If no transaction is active
        """
        raise NotImplementedError

    @abstractmethod
    def rollback_transaction(self) -> None:
        """Rollback current transaction.

        Raises:
            TransactionError: If no transaction is active
        """
        raise NotImplementedError

    @abstractmethod
    def in_transaction(self) -> bool:
        """Return True while a transaction is open on this driver."""
        raise NotImplementedError

    def create_savepoint(self, name: str) -> None:
        """Open a named savepoint inside the current transaction."""
        self.execute(f"SAVEPOINT {name}")

    def release_savepoint(self, name: str) -> None:
        """Release (keep) the work done since the named savepoint."""
        self.execute(f"RELEASE SAVEPOINT {name}")

    def rollback_to_savepoint(self, name: str) -> None:
        """Undo the work done since the named savepoint and release it."""
        self.execute(f"ROLLBACK TO SAVEPOINT {name}")
        self.execute(f"RELEASE SAVEPOINT {name}")

    def create_schema(self, schema_sql: List[str]) -> None:
        """
        Create database schema.

        Args:
            schema_sql: List of SQL statements for schema creation
        """
        for sql in schema_sql:
            self.execute(sql)
