"""Audit trail service.

Reads the append-only ``audit_logs`` history for display and records the
events that are not part of a larger transaction (downloads). SIGNED and
CREATED entries are written by the repository inside their transactions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from documents.dto.audit_event import AuditAction, AuditLogEntry
from documents.repository.document_repository import DocumentRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Audit trail access for one repository."""

    def __init__(self, repository: DocumentRepository):
        self._repo = repository

    def history(self, doc_id: str, *, newest_first: bool = True) -> List[AuditLogEntry]:
        """
        Audit entries of a document.

        Args:
            doc_id: Document ID
            newest_first: Display order (the stored order is chronological)
        """
        return self._repo.audit_history(doc_id, newest_first=newest_first)

    def count(self, doc_id: str, action: AuditAction) -> int:
        return sum(1 for e in self.history(doc_id, newest_first=False) if e.action == action)

    def record(
        self,
        *,
        doc_id: str,
        action: AuditAction,
        actor_id: str,
        details: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        entry = self._repo.append_audit(
            doc_id, action, details, {**(metadata or {}), "actor_id": actor_id}
        )
        logger.info(entry.to_log_string())
        return entry

    def log_downloaded(self, *, doc_id: str, actor_id: str, version_number: int) -> AuditLogEntry:
        return self.record(
            doc_id=doc_id,
            action=AuditAction.DOWNLOADED,
            actor_id=actor_id,
            details=f"Version {version_number} downloaded by {actor_id}",
            metadata={"version_number": version_number},
        )
