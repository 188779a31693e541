"""Documents feature exceptions.

Placement/compositing errors come from the signature feature and are
re-exported here so callers of the commit API import one taxonomy.
"""
from __future__ import annotations

from typing import Optional

from signature.exceptions.errors import (  # noqa: F401
    FontError,
    FormatError,
    PageIndexError,
    PlacementError,
    SignatureError,
)


class DocumentsError(Exception):
    """Base exception for documents feature."""


class ValidationError(DocumentsError):
    """Commit input is incomplete (e.g. no annotation present)."""


class DocumentNotFoundError(DocumentsError):
    """Document id (or its latest version) does not exist."""


class StatusTransitionError(DocumentsError):
    """Requested status change is not allowed (e.g. completed -> draft)."""


class CommitCancelledError(DocumentsError):
    """Commit was cancelled before any external write."""


class ConcurrencyError(DocumentsError):
    """Version sequence changed underneath the commit, or a commit is already running."""

    def __init__(self, message: str, *, expected: Optional[int] = None, actual: Optional[int] = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class StorageError(DocumentsError):
    """Blob or relational write failed."""

    def __init__(self, message: str, *, pointer: Optional[str] = None) -> None:
        super().__init__(message)
        self.pointer = pointer


class PersistenceError(StorageError):
    """
    The version/status/audit transaction failed after the artifact was stored.

    The transaction is rolled back, so readers never see a partial commit;
    ``pointer`` names the orphaned artifact for reconciliation.
    """
