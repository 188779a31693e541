"""Upload of a new document: artifact + draft document + version 1 + CREATED."""

from __future__ import annotations

import logging
import re
import time
from pathlib import PurePath
from uuid import uuid4

from documents.adapters.storage_adapter import StorageAdapter
from documents.dto.document_header import DocumentHeader
from documents.exceptions.errors import FormatError, PageIndexError, ValidationError
from documents.repository.document_repository import DocumentRepository
from signature.logic.pdf_signer import PdfSigner

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(filename: str) -> str:
    name = _UNSAFE.sub("_", PurePath(filename).name).strip("._")
    return name or "document.pdf"


class UploadService:
    def __init__(self, *, repository: DocumentRepository, storage: StorageAdapter) -> None:
        self._repo = repository
        self._storage = storage

    def upload(self, *, owner_id: str, filename: str, data: bytes, title: str | None = None) -> DocumentHeader:
        """
        Store a PDF and register it as version 1 of a new draft document.

        Raises:
            ValidationError: empty upload
            FormatError: bytes are not a PDF with at least one page
            StorageError / PersistenceError: write failed
        """
        if not data:
            raise ValidationError("empty upload")
        # Parse once so unreadable files never become documents.
        try:
            PdfSigner.page_size(data, 0)
        except PageIndexError as exc:
            raise FormatError(f"{filename} contains no pages") from exc

        pointer = f"{owner_id}/{int(time.time() * 1000)}-{uuid4().hex[:8]}-{_safe_name(filename)}"
        self._storage.put(pointer, data, "application/pdf")
        doc = self._repo.create_with_initial_version(
            owner_id=owner_id, title=title or filename, file_path=pointer
        )
        logger.info("Uploaded %s as document %s", pointer, doc.doc_id)
        return doc
