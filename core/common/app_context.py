# core/common/app_context.py
"""
Runtime context & service wiring for SignDesk.

IMPORTANT ARCHITECTURE RULE:
- ConfigService is the SINGLE source of truth for paths and limits.
- The context is an explicit object handed to callers; there is no
  module-level instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.config.config_service import ConfigService
from core.logging.logic.logger import configure_logging
from documents.adapters.filesystem_storage_adapter import FilesystemStorageAdapter
from documents.repository.repo_config import RepoConfig
from documents.repository.sqlite_document_repository import SQLiteDocumentRepository
from documents.services.audit_service import AuditService
from documents.services.download_service import DownloadService
from documents.services.reconciliation_service import ReconciliationService
from documents.services.signing_service import SigningService
from documents.services.upload_service import UploadService


@dataclass
class AppContext:
    """Central runtime context (no GUI state)."""

    config: ConfigService
    repository: SQLiteDocumentRepository
    storage: FilesystemStorageAdapter
    audit: AuditService
    signing: SigningService
    uploads: UploadService
    downloads: DownloadService
    reconciliation: ReconciliationService

    @classmethod
    def create(cls, config: Optional[ConfigService] = None, *, setup_logging: bool = True) -> "AppContext":
        cfg = config or ConfigService()
        if setup_logging:
            configure_logging(cfg.logging)

        repo_cfg = RepoConfig.from_config(cfg)
        repository = SQLiteDocumentRepository(repo_cfg)
        storage = FilesystemStorageAdapter(repo_cfg.root_path, secret=cfg.urls.secret)
        audit = AuditService(repository)
        return cls(
            config=cfg,
            repository=repository,
            storage=storage,
            audit=audit,
            signing=SigningService(repository=repository, storage=storage, signing=cfg.signing),
            uploads=UploadService(repository=repository, storage=storage),
            downloads=DownloadService(repository=repository, storage=storage, urls=cfg.urls, audit=audit),
            reconciliation=ReconciliationService(
                repository=repository, storage=storage, settings=cfg.reconciliation
            ),
        )

    def close(self) -> None:
        self.repository.close()
