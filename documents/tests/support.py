"""Shared setup for documents tests: temp database + blob root + services."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from documents.adapters.filesystem_storage_adapter import FilesystemStorageAdapter
from documents.repository.repo_config import RepoConfig
from documents.repository.sqlite_document_repository import SQLiteDocumentRepository
from documents.services.upload_service import UploadService
from signature.tests.pdf_factory import make_pdf


class RepositoryTestCase(unittest.TestCase):
    """Fresh repository and storage per test, both under one temp dir."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.cfg = RepoConfig(root_path=root / "blobs", db_path=root / "signdesk.db")
        self.repo = SQLiteDocumentRepository(self.cfg)
        self.storage = FilesystemStorageAdapter(self.cfg.root_path, secret="test-secret")
        self.uploads = UploadService(repository=self.repo, storage=self.storage)

    def tearDown(self) -> None:
        self.repo.close()
        self._tmp.cleanup()

    def upload(self, owner_id: str = "alice", title: str = "Service Agreement"):
        return self.uploads.upload(
            owner_id=owner_id, filename="agreement.pdf", data=make_pdf((title,)), title=title
        )

    def journal_rows(self):
        return self.repo._db.fetchall("SELECT * FROM commit_journal ORDER BY created_at")
