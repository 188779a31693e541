"""Document header DTO."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from documents.enum.document_status import DocumentStatus


@dataclass(frozen=True)
class DocumentHeader:
    """Immutable document header metadata."""

    doc_id: str
    owner_id: str
    title: str
    status: DocumentStatus
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DocumentHeader":
        return cls(
            doc_id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            status=DocumentStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
