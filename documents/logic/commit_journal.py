"""Commit journal: one row per artifact pointer a commit has started to upload.

``pending``   row written before the blob upload
``committed`` flipped inside the version/status/audit transaction
``abandoned`` upload or persist failed, or reconciliation gave up on it

A ``pending`` row older than any running commit therefore marks an
artifact that may exist in blob storage without a version record.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from documents.adapters.database_adapter import Transaction

SCHEMA = """
    CREATE TABLE IF NOT EXISTS commit_journal (
        file_path TEXT PRIMARY KEY,
        document_id TEXT NOT NULL,
        expected_version INTEGER NOT NULL,
        created_by TEXT NOT NULL,
        state TEXT NOT NULL CHECK (state IN ('pending', 'committed', 'abandoned')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_commit_journal_state ON commit_journal(state, created_at);
"""


class JournalState(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class JournalEntry:
    file_path: str
    document_id: str
    expected_version: int
    created_by: str
    state: JournalState
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "JournalEntry":
        return cls(
            file_path=row["file_path"],
            document_id=row["document_id"],
            expected_version=int(row["expected_version"]),
            created_by=row["created_by"],
            state=JournalState(row["state"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class CommitJournal:
    def __init__(self, tx: Transaction) -> None:
        self._tx = tx

    def open(self, *, file_path: str, document_id: str, expected_version: int, created_by: str) -> None:
        now = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        self._tx.insert(
            "commit_journal",
            {
                "file_path": file_path,
                "document_id": document_id,
                "expected_version": expected_version,
                "created_by": created_by,
                "state": JournalState.PENDING.value,
                "created_at": now,
                "updated_at": now,
            },
        )

    def mark(self, file_path: str, state: JournalState) -> int:
        now = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        cur = self._tx.execute(
            "UPDATE commit_journal SET state=?, updated_at=? WHERE file_path=? AND state='pending'",
            (state.value, now, file_path),
        )
        return cur.rowcount
