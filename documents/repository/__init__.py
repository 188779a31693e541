"""Version store: documents, their immutable version chain and audit rows."""

from documents.repository.document_repository import DocumentRepository
from documents.repository.repo_config import RepoConfig
from documents.repository.sqlite_document_repository import SQLiteDocumentRepository

__all__ = ["DocumentRepository", "RepoConfig", "SQLiteDocumentRepository"]
