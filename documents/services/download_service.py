"""Temporary URLs for the latest artifact of a document."""

from __future__ import annotations

from typing import Optional

from core.config.config_service import UrlConfig
from documents.adapters.storage_adapter import StorageAdapter
from documents.exceptions.errors import DocumentNotFoundError
from documents.repository.document_repository import DocumentRepository
from documents.services.audit_service import AuditService


class DownloadService:
    def __init__(
        self,
        *,
        repository: DocumentRepository,
        storage: StorageAdapter,
        urls: Optional[UrlConfig] = None,
        audit: Optional[AuditService] = None,
    ) -> None:
        self._repo = repository
        self._storage = storage
        self._urls = urls or UrlConfig()
        self._audit = audit or AuditService(repository)

    def _latest(self, doc_id: str):
        latest = self._repo.latest_version(doc_id)
        if latest is None:
            raise DocumentNotFoundError(f"Document {doc_id} has no versions")
        return latest

    def preview_url(self, doc_id: str) -> str:
        """URL the editor renders the latest version from (long TTL, not audited)."""
        latest = self._latest(doc_id)
        return self._storage.signed_url(latest.file_path, self._urls.preview_ttl_seconds)

    def download_url(self, doc_id: str, *, actor_id: str) -> str:
        """Short-lived download URL; writes a DOWNLOADED audit entry."""
        latest = self._latest(doc_id)
        url = self._storage.signed_url(latest.file_path, self._urls.ttl_seconds)
        self._audit.log_downloaded(doc_id=doc_id, actor_id=actor_id, version_number=latest.version_number)
        return url
