"""Document version DTO."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping


@dataclass(frozen=True)
class DocumentVersion:
    """Immutable entry of a document's version chain (numbers start at 1)."""

    document_id: str
    version_number: int
    file_path: str
    created_by: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DocumentVersion":
        return cls(
            document_id=row["document_id"],
            version_number=int(row["version_number"]),
            file_path=row["file_path"],
            created_by=row["created_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
