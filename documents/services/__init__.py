"""Services layer for documents module.

Business logic services: signing commit, upload, download, audit trail,
reconciliation.
"""

from documents.services.audit_service import AuditService
from documents.services.download_service import DownloadService
from documents.services.reconciliation_service import ReconciliationService, ReconciliationReport
from documents.services.signing_service import SigningService
from documents.services.upload_service import UploadService

__all__ = [
    "AuditService",
    "DownloadService",
    "ReconciliationService",
    "ReconciliationReport",
    "SigningService",
    "UploadService",
]
