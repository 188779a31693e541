"""Filesystem implementation of StorageAdapter.

Stores artifacts below a root directory (pointer = relative path).
Signed URLs are ``file://`` URLs carrying an expiry timestamp and an
HMAC-SHA256 signature over ``pointer|expires``.
"""

from __future__ import annotations
from pathlib import Path, PurePosixPath
from typing import Callable, Optional
from urllib.parse import parse_qs, quote, unquote, urlsplit
import hashlib
import hmac
import json
import logging
import time

from documents.adapters.storage_adapter import StorageAdapter
from documents.exceptions.errors import StorageError

logger = logging.getLogger(__name__)


class FilesystemStorageAdapter(StorageAdapter):
    """Local filesystem implementation of StorageAdapter."""

    def __init__(self, root_path: str | Path, *, secret: str,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize filesystem storage.

        Args:
            root_path: Root directory for artifact storage
            secret: Key for signing URLs
            clock: Time source (seconds since epoch), for tests
        """
        self._root = Path(root_path).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._secret = secret.encode("utf-8")
        self._clock = clock or time.time

    def _path(self, pointer: str) -> Path:
        rel = PurePosixPath(pointer)
        if not pointer or rel.is_absolute() or ".." in rel.parts:
            raise StorageError(f"Invalid storage pointer: {pointer!r}", pointer=pointer)
        return self._root.joinpath(*rel.parts)

    def put(self, pointer: str, data: bytes, content_type: str = "application/pdf") -> str:
        """Write once; an existing pointer is an error."""
        path = self._path(pointer)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as fh:
                fh.write(data)
            path.with_name(path.name + ".meta.json").write_text(
                json.dumps({"content_type": content_type, "size": len(data)}), encoding="utf-8"
            )
        except FileExistsError as exc:
            raise StorageError(f"Pointer already in use: {pointer}", pointer=pointer) from exc
        except OSError as exc:
            raise StorageError(f"Failed to store {pointer}: {exc}", pointer=pointer) from exc
        logger.info("Stored %s (%d bytes, %s)", pointer, len(data), content_type)
        return pointer

    def get(self, pointer: str) -> bytes:
        path = self._path(pointer)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {pointer}: {exc}", pointer=pointer) from exc

    def exists(self, pointer: str) -> bool:
        return self._path(pointer).is_file()

    def _signature(self, pointer: str, expires: int) -> str:
        msg = f"{pointer}|{expires}".encode("utf-8")
        return hmac.new(self._secret, msg, hashlib.sha256).hexdigest()

    def signed_url(self, pointer: str, ttl_seconds: int) -> str:
        if not self.exists(pointer):
            raise StorageError(f"No artifact stored under {pointer}", pointer=pointer)
        expires = int(self._clock()) + int(ttl_seconds)
        path = self._path(pointer).as_posix()
        return (
            f"file://{quote(path)}?pointer={quote(pointer, safe='')}"
            f"&expires={expires}&signature={self._signature(pointer, expires)}"
        )

    def verify_signed_url(self, url: str) -> Optional[str]:
        """Return the pointer if ``url`` is authentic and not expired, else None."""
        query = parse_qs(urlsplit(url).query)
        try:
            pointer = unquote(query["pointer"][0])
            expires = int(query["expires"][0])
            signature = query["signature"][0]
        except (KeyError, IndexError, ValueError):
            return None
        if not hmac.compare_digest(signature, self._signature(pointer, expires)):
            return None
        if self._clock() > expires:
            return None
        return pointer

    def discard(self, pointer: str) -> bool:
        path = self._path(pointer)
        removed = False
        for p in (path, path.with_name(path.name + ".meta.json")):
            try:
                p.unlink()
                removed = True
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise StorageError(f"Failed to discard {pointer}: {exc}", pointer=pointer) from exc
        if removed:
            logger.info("Discarded orphaned artifact %s", pointer)
        return removed
