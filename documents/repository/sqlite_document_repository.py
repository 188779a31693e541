"""SQLite implementation of DocumentRepository.

Owns the three tables of the version store (documents, document_versions,
audit_logs) plus the commit journal. Every multi-row write runs in one
``BEGIN IMMEDIATE`` transaction, and the schema itself refuses edits to
versions and audit rows, non-contiguous version numbers and status
regressions.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from documents.adapters.database_adapter import DatabaseAdapter, Transaction
from documents.adapters.sqlite_adapter import SQLiteAdapter
from documents.dto.audit_event import AuditAction, AuditLogEntry
from documents.dto.document_header import DocumentHeader
from documents.dto.document_version import DocumentVersion
from documents.enum.document_status import DocumentStatus
from documents.exceptions.errors import (
    ConcurrencyError,
    DocumentNotFoundError,
    PersistenceError,
    StatusTransitionError,
    StorageError,
)
from documents.logic import audit_log, commit_journal
from documents.logic.audit_log import AuditLog
from documents.logic.commit_journal import CommitJournal, JournalEntry, JournalState
from documents.repository.repo_config import RepoConfig

logger = logging.getLogger(__name__)


_SCHEMA = """
    CREATE TABLE IF NOT EXISTS documents (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        title TEXT NOT NULL,
        status TEXT NOT NULL CHECK (status IN ('draft', 'completed', 'rejected')),
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS document_versions (
        document_id TEXT NOT NULL REFERENCES documents(id),
        version_number INTEGER NOT NULL CHECK (version_number > 0),
        file_path TEXT NOT NULL UNIQUE,
        created_by TEXT NOT NULL,
        created_at TEXT NOT NULL,
        PRIMARY KEY (document_id, version_number)
    );

    CREATE TRIGGER IF NOT EXISTS document_versions_contiguous
    BEFORE INSERT ON document_versions
    WHEN NEW.version_number != (
        SELECT COALESCE(MAX(version_number), 0) + 1
        FROM document_versions WHERE document_id = NEW.document_id
    )
    BEGIN SELECT RAISE(ABORT, 'version_number must extend the version chain by one'); END;

    CREATE TRIGGER IF NOT EXISTS document_versions_no_update BEFORE UPDATE ON document_versions
    BEGIN SELECT RAISE(ABORT, 'document_versions is append-only'); END;

    CREATE TRIGGER IF NOT EXISTS document_versions_no_delete BEFORE DELETE ON document_versions
    BEGIN SELECT RAISE(ABORT, 'document_versions is append-only'); END;

    CREATE TRIGGER IF NOT EXISTS documents_status_forward_only
    BEFORE UPDATE OF status ON documents
    WHEN OLD.status != 'draft' AND NEW.status != OLD.status
    BEGIN SELECT RAISE(ABORT, 'document status cannot leave a terminal state'); END;
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class SQLiteDocumentRepository:
    """SQLite backend for documents.

    Note:
    - Repository is DB-only.
    - Artifact bytes are stored by the StorageAdapter; rows only hold pointers.
    """

    def __init__(self, config: RepoConfig, *, db_adapter: Optional[DatabaseAdapter] = None) -> None:
        """
        Args:
            config:  Repository configuration
            db_adapter:  Database adapter (default: SQLiteAdapter)
        """
        self._cfg = config
        self._db = db_adapter or SQLiteAdapter(config.db_path, timeout=config.db_timeout_seconds)
        self._ensure_schema()

    # =========================================================================
    # Schema Management
    # =========================================================================

    def _ensure_schema(self) -> None:
        """Create database schema if not exists."""
        self._db.executescript(
            "PRAGMA journal_mode=WAL;"
            + _SCHEMA
            + audit_log.SCHEMA
            + commit_journal.SCHEMA
        )

    def close(self) -> None:
        self._db.close()

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, doc_id: str) -> Optional[DocumentHeader]:
        """Get document by ID."""
        row = self._db.fetchone("SELECT * FROM documents WHERE id=?", (doc_id,))
        return DocumentHeader.from_row(row) if row else None

    def require(self, doc_id: str) -> DocumentHeader:
        doc = self.get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(f"Document not found: {doc_id}")
        return doc

    def list(self, *, owner_id: Optional[str] = None) -> List[DocumentHeader]:
        """List documents, newest first."""
        sql = "SELECT * FROM documents"
        params: tuple = ()
        if owner_id is not None:
            sql += " WHERE owner_id = ?"
            params = (owner_id,)
        sql += " ORDER BY created_at DESC"
        return [DocumentHeader.from_row(r) for r in self._db.fetchall(sql, params)]

    def latest_version(self, doc_id: str) -> Optional[DocumentVersion]:
        row = self._db.fetchone(
            "SELECT * FROM document_versions WHERE document_id=? "
            "ORDER BY version_number DESC LIMIT 1",
            (doc_id,),
        )
        return DocumentVersion.from_row(row) if row else None

    def versions(self, doc_id: str) -> List[DocumentVersion]:
        rows = self._db.fetchall(
            "SELECT * FROM document_versions WHERE document_id=? ORDER BY version_number ASC",
            (doc_id,),
        )
        return [DocumentVersion.from_row(r) for r in rows]

    def version_by_file_path(self, file_path: str) -> Optional[DocumentVersion]:
        row = self._db.fetchone("SELECT * FROM document_versions WHERE file_path=?", (file_path,))
        return DocumentVersion.from_row(row) if row else None

    def audit_history(self, doc_id: str, *, newest_first: bool = True) -> List[AuditLogEntry]:
        order = "DESC" if newest_first else "ASC"
        rows = self._db.fetchall(
            f"SELECT * FROM audit_logs WHERE document_id=? ORDER BY id {order}",
            (doc_id,),
        )
        return [AuditLogEntry.from_row(r) for r in rows]

    # =========================================================================
    # Writes
    # =========================================================================

    @staticmethod
    def _current_status(tx: Transaction, doc_id: str) -> DocumentStatus:
        row = tx.fetchone("SELECT status FROM documents WHERE id=?", (doc_id,))
        if row is None:
            raise DocumentNotFoundError(f"Document not found: {doc_id}")
        return DocumentStatus(row["status"])

    @staticmethod
    def _set_status(tx: Transaction, doc_id: str, current: DocumentStatus, target: DocumentStatus) -> None:
        if current == target:
            return
        if not current.can_transition_to(target):
            raise StatusTransitionError(
                f"Document {doc_id}: status {current.value} -> {target.value} not allowed"
            )
        tx.execute("UPDATE documents SET status=? WHERE id=?", (target.value, doc_id))

    def create_with_initial_version(self, *, owner_id: str, title: str, file_path: str) -> DocumentHeader:
        """Create draft document + version 1 + CREATED audit entry (one transaction)."""
        doc_id = str(uuid4())
        now = _now()
        try:
            with self._db.transaction() as tx:
                tx.insert(
                    "documents",
                    {
                        "id": doc_id,
                        "owner_id": owner_id,
                        "title": title,
                        "status": DocumentStatus.DRAFT.value,
                        "created_at": now,
                    },
                )
                tx.insert(
                    "document_versions",
                    {
                        "document_id": doc_id,
                        "version_number": 1,
                        "file_path": file_path,
                        "created_by": owner_id,
                        "created_at": now,
                    },
                )
                AuditLog(tx).write(
                    doc_id,
                    AuditAction.CREATED,
                    f"Uploaded {title}",
                    {"version_number": 1, "file_path": file_path, "actor_id": owner_id},
                )
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Failed to create document {title!r}: {exc}", pointer=file_path
            ) from exc

        logger.info("Created document %s (%s) with version 1", doc_id, title)
        return self.require(doc_id)

    def append_signed_version(
        self,
        *,
        doc_id: str,
        expected_version: int,
        file_path: str,
        created_by: str,
        details: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> DocumentVersion:
        """
        Version insert, status -> completed, SIGNED audit entry and journal
        flip, all in one transaction.

        Raises:
            ConcurrencyError: latest version is no longer ``expected_version``
            PersistenceError: any database failure, or the journal row for
                ``file_path`` is not pending (transaction rolled back)
        """
        now = _now()
        try:
            with self._db.transaction() as tx:
                status = self._current_status(tx, doc_id)
                row = tx.fetchone(
                    "SELECT COALESCE(MAX(version_number), 0) AS latest "
                    "FROM document_versions WHERE document_id=?",
                    (doc_id,),
                )
                latest = int(row["latest"]) if row else 0
                if latest != expected_version:
                    raise ConcurrencyError(
                        f"Document {doc_id} is at version {latest}, commit expected {expected_version}",
                        expected=expected_version,
                        actual=latest,
                    )
                version_number = latest + 1

                tx.insert(
                    "document_versions",
                    {
                        "document_id": doc_id,
                        "version_number": version_number,
                        "file_path": file_path,
                        "created_by": created_by,
                        "created_at": now,
                    },
                )
                self._set_status(tx, doc_id, status, DocumentStatus.COMPLETED)
                AuditLog(tx).write(
                    doc_id,
                    AuditAction.SIGNED,
                    details,
                    {
                        **(data or {}),
                        "version_number": version_number,
                        "file_path": file_path,
                        "actor_id": created_by,
                    },
                )
                if CommitJournal(tx).mark(file_path, JournalState.COMMITTED) != 1:
                    # an abandoned pointer may already be discarded from storage
                    raise PersistenceError(
                        f"No pending journal row for {file_path}; commit refused",
                        pointer=file_path,
                    )
        except sqlite3.IntegrityError as exc:
            msg = str(exc).lower()
            if "version_number" in msg:
                raise ConcurrencyError(
                    f"Version sequence of {doc_id} changed during commit: {exc}",
                    expected=expected_version,
                ) from exc
            raise PersistenceError(f"Commit of {file_path} rejected: {exc}", pointer=file_path) from exc
        except sqlite3.Error as exc:
            raise PersistenceError(f"Commit of {file_path} failed: {exc}", pointer=file_path) from exc

        return DocumentVersion(
            document_id=doc_id,
            version_number=version_number,
            file_path=file_path,
            created_by=created_by,
            created_at=datetime.fromisoformat(now),
        )

    def reject(self, doc_id: str, *, actor_id: str, reason: str = "") -> DocumentHeader:
        """draft -> rejected, with a REJECTED audit entry."""
        try:
            with self._db.transaction() as tx:
                status = self._current_status(tx, doc_id)
                if status != DocumentStatus.DRAFT:
                    raise StatusTransitionError(
                        f"Document {doc_id}: status {status.value} -> rejected not allowed"
                    )
                self._set_status(tx, doc_id, status, DocumentStatus.REJECTED)
                AuditLog(tx).write(doc_id, AuditAction.REJECTED, reason, {"actor_id": actor_id})
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to reject {doc_id}: {exc}") from exc
        return self.require(doc_id)

    def append_audit(self, doc_id: str, action: AuditAction, details: str = "",
                     data: Optional[Dict[str, Any]] = None) -> AuditLogEntry:
        try:
            with self._db.transaction() as tx:
                self._current_status(tx, doc_id)
                return AuditLog(tx).write(doc_id, action, details, data)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write audit entry for {doc_id}: {exc}") from exc

    # =========================================================================
    # Commit journal
    # =========================================================================

    def open_journal(self, *, file_path: str, doc_id: str, expected_version: int, created_by: str) -> None:
        try:
            with self._db.transaction() as tx:
                CommitJournal(tx).open(
                    file_path=file_path,
                    document_id=doc_id,
                    expected_version=expected_version,
                    created_by=created_by,
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to journal {file_path}: {exc}", pointer=file_path) from exc

    def mark_journal(self, file_path: str, state: JournalState) -> bool:
        """Move a pending journal row to ``state``; False if it was not pending."""
        try:
            with self._db.transaction() as tx:
                return CommitJournal(tx).mark(file_path, state) > 0
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to update journal for {file_path}: {exc}", pointer=file_path) from exc

    def pending_journal(self, *, older_than: datetime) -> List[JournalEntry]:
        rows = self._db.fetchall(
            "SELECT * FROM commit_journal WHERE state='pending' AND created_at < ? ORDER BY created_at",
            (older_than.astimezone(timezone.utc).isoformat(timespec="microseconds"),),
        )
        return [JournalEntry.from_row(r) for r in rows]
