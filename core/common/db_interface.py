"""
core/common/db_interface.py
===========================

SQLite connection factory + the minimal contract for modules that own a
database file.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
import sqlite3


def create_sqlite_connection(
    db_path: Path,
    *,
    check_same_thread: bool = False,
    foreign_keys: bool = False,
    timeout: float = 10.0,
    autocommit: bool = False,
) -> sqlite3.Connection:
    """Open a connection with ``sqlite3.Row`` rows.

    Args:
        db_path: database file (parent directory must exist)
        check_same_thread: passed through to :func:`sqlite3.connect`
        foreign_keys: enable ``PRAGMA foreign_keys``
        timeout: seconds to wait for a competing writer's lock
        autocommit: no implicit transactions; the caller issues
            ``BEGIN IMMEDIATE`` / ``COMMIT`` / ``ROLLBACK`` itself
    """
    conn = sqlite3.connect(
        str(db_path),
        check_same_thread=check_same_thread,
        timeout=timeout,
        isolation_level=None if autocommit else "",
    )
    conn.row_factory = sqlite3.Row
    if foreign_keys:
        conn.execute("PRAGMA foreign_keys = ON")
    return conn


class DatabaseAccess(ABC):
    """A component backed by one SQLite file."""

    @property
    @abstractmethod
    def db_path(self) -> Path:
        raise NotImplementedError

    @abstractmethod
    def connect(self) -> sqlite3.Connection:
        """Shared connection for reads."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError
