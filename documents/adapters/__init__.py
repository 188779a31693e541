"""Adapters for external dependencies.

Provides abstraction layers for:
- Database access (SQL-agnostic)
- Artifact storage (filesystem/cloud-agnostic)
- Signature compositing (annotation burn-in)
"""

from documents.adapters.database_adapter import DatabaseAdapter, Transaction
from documents.adapters.sqlite_adapter import SQLiteAdapter
from documents.adapters.storage_adapter import StorageAdapter
from documents.adapters.filesystem_storage_adapter import FilesystemStorageAdapter
from documents.adapters.signature_adapter import SignatureAdapter, BurnInSignatureAdapter

__all__ = [
    "DatabaseAdapter",
    "Transaction",
    "SQLiteAdapter",
    "StorageAdapter",
    "FilesystemStorageAdapter",
    "SignatureAdapter",
    "BurnInSignatureAdapter",
]
