"""Reconciliation of interrupted commits.

A journal row still ``pending`` after the grace period belongs to a commit
that died between upload and its database transaction (crash, kill). The
transaction is atomic, so the only question is whether a version row with
that pointer exists:

- yes -> the journal flip was lost; mark ``committed``
- no  -> the artifact is an orphan; mark ``abandoned`` (and optionally
         delete the blob)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from core.config.config_service import ReconciliationConfig
from documents.adapters.storage_adapter import StorageAdapter
from documents.logic.commit_journal import JournalState
from documents.repository.document_repository import DocumentRepository

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    committed: List[str] = field(default_factory=list)
    abandoned: List[str] = field(default_factory=list)
    discarded: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.committed) + len(self.abandoned)


class ReconciliationService:
    def __init__(
        self,
        *,
        repository: DocumentRepository,
        storage: StorageAdapter,
        settings: Optional[ReconciliationConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repo = repository
        self._storage = storage
        self._cfg = settings or ReconciliationConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run(self) -> ReconciliationReport:
        report = ReconciliationReport()
        cutoff = self._clock() - timedelta(seconds=self._cfg.grace_seconds)
        for entry in self._repo.pending_journal(older_than=cutoff):
            if self._repo.version_by_file_path(entry.file_path) is not None:
                if self._repo.mark_journal(entry.file_path, JournalState.COMMITTED):
                    report.committed.append(entry.file_path)
                continue

            if not self._repo.mark_journal(entry.file_path, JournalState.ABANDONED):
                continue
            report.abandoned.append(entry.file_path)
            logger.warning(
                "Orphaned artifact %s for document %s (expected version %d)",
                entry.file_path, entry.document_id, entry.expected_version,
            )
            if self._cfg.discard_orphans and self._storage.discard(entry.file_path):
                report.discarded.append(entry.file_path)

        if report.total:
            logger.info(
                "Reconciliation: %d committed, %d abandoned, %d discarded",
                len(report.committed), len(report.abandoned), len(report.discarded),
            )
        return report
