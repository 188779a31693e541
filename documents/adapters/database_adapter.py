"""Database adapter abstraction.

Provides database-agnostic interface for repository layer.
Reads run on a shared connection; every write runs inside ``transaction()``
so a group of statements is applied completely or not at all.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, List, Dict, Optional


class Transaction(ABC):
    """Statements executed inside one write transaction."""

    @abstractmethod
    def execute(self, query: str, params: tuple = ()) -> Any:
        raise NotImplementedError

    @abstractmethod
    def fetchone(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, table: str, data: Dict[str, Any]) -> int:
        """
        Insert row and return last inserted ID.

        Args:
            table: Table name
            data: Column-value mapping
        """
        raise NotImplementedError


class DatabaseAdapter(ABC):
    """Abstract database adapter for SQL operations."""

    @abstractmethod
    def fetchone(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """
        Fetch single row as dictionary.

        Args:
            query: SQL query
            params: Query parameters

        Returns:
            Row as dict or None
        """
        raise NotImplementedError

    @abstractmethod
    def fetchall(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """
        Fetch all rows as list of dictionaries.

        Args:
            query: SQL query
            params: Query parameters

        Returns:
            List of rows (each row is a dict)
        """
        raise NotImplementedError

    @abstractmethod
    def transaction(self) -> AbstractContextManager[Transaction]:
        """
        Open an exclusive write transaction.

        Commits when the block exits normally, rolls back on any exception
        and re-raises it.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Close database connection."""
        raise NotImplementedError

    @abstractmethod
    def executescript(self, script: str) -> None:
        """
        Execute multiple SQL statements (for schema creation).

        Args:
            script: Multi-statement SQL script
        """
        raise NotImplementedError
