"""Storage adapter abstraction.

Defines interface for document artifact (blob) storage.
Allows switching between local filesystem, S3, Azure Blob, etc.
Pointers are opaque and write-once: ``put`` never overwrites.
"""

from __future__ import annotations
from abc import ABC, abstractmethod


class StorageAdapter(ABC):
    """Abstract storage adapter for document artifacts."""

    @abstractmethod
    def put(self, pointer: str, data: bytes, content_type: str = "application/pdf") -> str:
        """
        Store bytes under a new pointer.

        Args:
            pointer: Fresh pointer (e.g. "<owner>/<millis>-signed.pdf")
            data: Artifact bytes
            content_type: MIME type

        Returns:
            The pointer

        Raises:
            StorageError: pointer already used or write failed
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, pointer: str) -> bytes:
        """
        Read artifact bytes.

        Raises:
            StorageError: pointer unknown or read failed
        """
        raise NotImplementedError

    @abstractmethod
    def exists(self, pointer: str) -> bool:
        """
        Check if an artifact exists.

        Args:
            pointer: Pointer to check

        Returns:
            True if stored
        """
        raise NotImplementedError

    @abstractmethod
    def signed_url(self, pointer: str, ttl_seconds: int) -> str:
        """
        Temporary fetchable URL for an artifact.

        Args:
            pointer: Stored pointer
            ttl_seconds: Validity in seconds

        Returns:
            URL string
        """
        raise NotImplementedError

    @abstractmethod
    def discard(self, pointer: str) -> bool:
        """
        Remove an orphaned artifact (never referenced by a version).

        Returns:
            True if something was removed
        """
        raise NotImplementedError
