"""SQLite implementation of DatabaseAdapter.

Uses core.common.db_interface for connection management. Each transaction
gets its own connection and starts with ``BEGIN IMMEDIATE``, which takes
the database write lock up front: concurrent writers (threads or processes)
queue on the lock instead of interleaving read-then-write sequences.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Iterator, List, Dict, Optional
from pathlib import Path
import logging
import sqlite3
import threading

from documents.adapters.database_adapter import DatabaseAdapter, Transaction
from core.common.db_interface import DatabaseAccess, create_sqlite_connection

logger = logging.getLogger(__name__)


class SQLiteTransaction(Transaction):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def execute(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        return self._conn.execute(query, params)

    def fetchone(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        row = self._conn.execute(query, params).fetchone()
        return dict(row) if row else None

    def insert(self, table: str, data: Dict[str, Any]) -> int:
        columns = ", ".join(data.keys())
        placeholders = ", ".join(["?"] * len(data))
        cursor = self._conn.execute(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", tuple(data.values())
        )
        return cursor.lastrowid


class SQLiteAdapter(DatabaseAdapter, DatabaseAccess):
    """SQLite implementation of DatabaseAdapter."""

    def __init__(self, db_path: str | Path, *, timeout: float = 10.0):
        """
        Initialize SQLite adapter.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait for the write lock
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def connect(self) -> sqlite3.Connection:
        """Get or create the shared (read) connection."""
        if self._conn is None:
            self._conn = create_sqlite_connection(
                self._db_path,
                check_same_thread=False,
                foreign_keys=True,
                timeout=self._timeout,
                autocommit=True,
            )
        return self._conn

    def fetchone(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch single row as dictionary."""
        with self._lock:
            row = self.connect().execute(query, params).fetchone()
        return dict(row) if row else None

    def fetchall(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all rows as list of dictionaries."""
        with self._lock:
            rows = self.connect().execute(query, params).fetchall()
        return [dict(row) for row in rows]

    @contextmanager
    def transaction(self) -> Iterator[SQLiteTransaction]:
        conn = create_sqlite_connection(
            self._db_path,
            check_same_thread=False,
            foreign_keys=True,
            timeout=self._timeout,
            autocommit=True,
        )
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield SQLiteTransaction(conn)
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn:
                try:
                    self._conn.close()
                finally:
                    self._conn = None

    def executescript(self, script: str) -> None:
        """Execute multiple SQL statements."""
        with self._lock:
            self.connect().executescript(script)
