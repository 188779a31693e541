"""Audit event DTO for the document history.

Entries live in the ``audit_logs`` table, are append-only and ordered by
``id`` (insertion order). The database rejects UPDATE and DELETE on that table.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, Mapping
from enum import Enum


class AuditAction(str, Enum):
    """Audit action types for document lifecycle."""

    CREATED = "CREATED"
    SIGNED = "SIGNED"
    REJECTED = "REJECTED"
    DOWNLOADED = "DOWNLOADED"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log event."""

    document_id: str
    action: AuditAction
    created_at: datetime
    details: str = ""
    """Human readable detail line (shown in the audit trail)"""

    data: Dict[str, Any] = field(default_factory=dict)
    """Structured context, e.g. version number, file path, actor"""

    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AuditLogEntry":
        return cls(
            id=row["id"],
            document_id=row["document_id"],
            action=AuditAction(row["action"]),
            details=row["details"] or "",
            data=json.loads(row["data"] or "{}"),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "action": self.action.value,
            "details": self.details,
            "data": self.data,
            "created_at": self.created_at.isoformat(),
        }

    def to_log_string(self) -> str:
        parts = [
            f"[{self.created_at.isoformat()}]",
            self.action.value,
            f"on {self.document_id}",
        ]
        if self.details:
            parts.append(f"- {self.details}")
        return " ".join(parts)
