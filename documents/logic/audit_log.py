from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from documents.adapters.database_adapter import Transaction
from documents.dto.audit_event import AuditAction, AuditLogEntry

SCHEMA = """
    CREATE TABLE IF NOT EXISTS audit_logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        document_id TEXT NOT NULL REFERENCES documents(id),
        action TEXT NOT NULL,
        details TEXT,
        data TEXT,
        created_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_audit_logs_document
        ON audit_logs(document_id, id);
    CREATE TRIGGER IF NOT EXISTS audit_logs_no_update BEFORE UPDATE ON audit_logs
    BEGIN SELECT RAISE(ABORT, 'audit_logs is append-only'); END;
    CREATE TRIGGER IF NOT EXISTS audit_logs_no_delete BEFORE DELETE ON audit_logs
    BEGIN SELECT RAISE(ABORT, 'audit_logs is append-only'); END;
"""


class AuditLog:
    """Writes audit rows inside the caller's transaction."""

    def __init__(self, tx: Transaction) -> None:
        self._tx = tx

    def write(self, document_id: str, action: AuditAction, details: str = "",
              data: dict[str, Any] | None = None) -> AuditLogEntry:
        created_at = datetime.now(timezone.utc)
        payload = data or {}
        row_id = self._tx.insert(
            "audit_logs",
            {
                "document_id": document_id,
                "action": action.value,
                "details": details,
                "data": json.dumps(payload, ensure_ascii=False, default=str),
                "created_at": created_at.isoformat(timespec="microseconds"),
            },
        )
        return AuditLogEntry(
            id=row_id,
            document_id=document_id,
            action=action,
            details=details,
            data=payload,
            created_at=created_at,
        )
