"""Data Transfer Objects for documents module.

DTOs are immutable data containers for transferring data between layers.
"""

from documents.dto.audit_event import AuditAction, AuditLogEntry
from documents.dto.document_header import DocumentHeader
from documents.dto.document_version import DocumentVersion

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "DocumentHeader",
    "DocumentVersion",
]
