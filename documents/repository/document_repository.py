"""Document repository protocol (interface).

Defines the contract for document data access without implementation details.
"""

from __future__ import annotations
from datetime import datetime
from typing import Protocol, List, Dict, Optional, Any

from documents.dto.audit_event import AuditAction, AuditLogEntry
from documents.dto.document_header import DocumentHeader
from documents.dto.document_version import DocumentVersion
from documents.logic.commit_journal import JournalEntry, JournalState


class DocumentRepository(Protocol):
    """Protocol for document data access."""

    # ===== Query Operations =====

    def get(self, doc_id: str) -> Optional[DocumentHeader]:
        ...

    def list(self, *, owner_id: Optional[str] = None) -> List[DocumentHeader]:
        ...

    def latest_version(self, doc_id: str) -> Optional[DocumentVersion]:
        ...

    def versions(self, doc_id: str) -> List[DocumentVersion]:
        ...

    def version_by_file_path(self, file_path: str) -> Optional[DocumentVersion]:
        ...

    def audit_history(self, doc_id: str, *, newest_first: bool = True) -> List[AuditLogEntry]:
        ...

    # ===== Lifecycle Operations =====

    def create_with_initial_version(
            self,
            *,
            owner_id: str,
            title: str,
            file_path: str,
    ) -> DocumentHeader:
        """Create draft document + version 1 + CREATED audit entry atomically."""
        ...

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
        """Append version, complete document, audit SIGNED atomically."""
        ...

    def reject(self, doc_id: str, *, actor_id: str, reason: str = "") -> DocumentHeader:
        ...

    def append_audit(self, doc_id: str, action: AuditAction, details: str = "",
                     data: Optional[Dict[str, Any]] = None) -> AuditLogEntry:
        ...

    # ===== Commit journal =====

    def open_journal(self, *, file_path: str, doc_id: str, expected_version: int, created_by: str) -> None:
        ...

    def mark_journal(self, file_path: str, state: JournalState) -> bool:
        ...

    def pending_journal(self, *, older_than: datetime) -> List[JournalEntry]:
        ...
