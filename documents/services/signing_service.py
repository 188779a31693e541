"""Signing commit protocol.

composite -> store artifact -> (version + status + audit) in one transaction.

Failure boundaries:
- before UPLOADING nothing has been written anywhere;
- during UPLOADING the journal row names the pointer, no version exists;
- PERSISTING is a single database transaction, so readers see either the
  complete commit or none of it. A failed commit leaves at most an orphaned
  artifact, which the journal marks ``abandoned`` (or reconciliation does).
"""

from __future__ import annotations

import logging
import time
from typing import Optional
from uuid import uuid4

from core.config.config_service import SigningConfig
from documents.adapters.signature_adapter import BurnInSignatureAdapter, SignatureAdapter
from documents.adapters.storage_adapter import StorageAdapter
from documents.exceptions.errors import (
    CommitCancelledError,
    ConcurrencyError,
    DocumentNotFoundError,
    DocumentsError,
    StorageError,
    ValidationError,
)
from documents.logic.commit_journal import JournalState
from documents.models.signing_session import CommitResult, CommitState, SigningSession
from documents.repository.document_repository import DocumentRepository
from signature.models.annotation import Annotation

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class SigningService:
    """Runs the commit state machine for a SigningSession."""

    def __init__(
        self,
        *,
        repository: DocumentRepository,
        storage: StorageAdapter,
        signing: Optional[SigningConfig] = None,
        signer: Optional[SignatureAdapter] = None,
    ) -> None:
        self._repo = repository
        self._storage = storage
        self._cfg = signing or SigningConfig()
        self._signer = signer or BurnInSignatureAdapter(font_bounds=self._cfg.font_bounds)

    # ------------------------------------------------------------------ #
    #  Session handling
    # ------------------------------------------------------------------ #
    def open_session(self, document_id: str, actor_id: str,
                     annotation: Optional[Annotation] = None) -> SigningSession:
        """Start editing on top of the document's current latest version."""
        self._repo_require(document_id)
        latest = self._repo.latest_version(document_id)
        if latest is None:
            raise DocumentNotFoundError(f"Document {document_id} has no versions")
        return SigningSession(
            document_id=document_id,
            actor_id=actor_id,
            base_file_path=latest.file_path,
            expected_version=latest.version_number,
            render_width=self._cfg.render_width,
            page_index=self._cfg.target_page,
            annotation=annotation if annotation is not None else Annotation(),
        )

    def rebase(self, session: SigningSession) -> SigningSession:
        """Point a failed/drafting session at the current latest version (after a ConcurrencyError)."""
        if session.state == CommitState.FAILED:
            session.transition(CommitState.DRAFTING)
        if session.state != CommitState.DRAFTING:
            raise ValidationError(f"cannot rebase a session in state {session.state.value}")
        latest = self._repo.latest_version(session.document_id)
        if latest is None:
            raise DocumentNotFoundError(f"Document {session.document_id} has no versions")
        session.base_file_path = latest.file_path
        session.expected_version = latest.version_number
        return session

    def _repo_require(self, document_id: str) -> None:
        if self._repo.get(document_id) is None:
            raise DocumentNotFoundError(f"Document not found: {document_id}")

    # ------------------------------------------------------------------ #
    #  Commit
    # ------------------------------------------------------------------ #
    def commit(self, session: SigningSession) -> CommitResult:
        if not session._commit_lock.acquire(blocking=False):
            raise ConcurrencyError(f"A commit for document {session.document_id} is already in progress")
        try:
            return self._commit(session)
        finally:
            session._commit_lock.release()

    def _commit(self, session: SigningSession) -> CommitResult:
        if session.state == CommitState.COMMITTED:
            raise ValidationError("session already committed")
        if session.state == CommitState.FAILED:
            self._move(session, CommitState.DRAFTING)

        annotation = session.annotation
        if annotation is None:
            raise ValidationError("no annotation to commit")

        # --- COMPOSITING: no side effects ---------------------------------
        self._move(session, CommitState.COMPOSITING)
        try:
            self._check_cancel(session)
            base = self._storage.get(session.base_file_path)
            placement = self._signer.place(
                payload=base,
                annotation=annotation,
                render_width=session.render_width,
                page_index=session.page_index,
            )
            self._check_cancel(session)
            composited = self._signer.sign(payload=base, annotation=annotation, placement=placement)
            self._check_cancel(session)
        except Exception as exc:
            self._fail(session, exc)
            raise

        # --- UPLOADING: cancellation no longer honoured --------------------
        self._enter_upload(session)
        pointer = self._new_pointer(session.actor_id)
        try:
            self._repo.open_journal(
                file_path=pointer,
                doc_id=session.document_id,
                expected_version=session.expected_version,
                created_by=session.actor_id,
            )
        except Exception as exc:
            self._fail(session, exc)
            raise
        try:
            self._storage.put(pointer, composited, PDF_CONTENT_TYPE)
        except Exception as exc:
            self._abandon(pointer)
            self._fail(session, exc)
            if isinstance(exc, DocumentsError):
                raise
            raise StorageError(f"Upload of {pointer} failed: {exc}", pointer=pointer) from exc

        # --- PERSISTING: one transaction -----------------------------------
        self._move(session, CommitState.PERSISTING)
        try:
            version = self._repo.append_signed_version(
                doc_id=session.document_id,
                expected_version=session.expected_version,
                file_path=pointer,
                created_by=session.actor_id,
                details=f'Signed by {session.actor_id}: "{annotation.text}"',
                data={
                    "text": annotation.text,
                    "font_family": annotation.font_family.value,
                    "font_size": placement.font_size,
                    "color": annotation.color.to_hex(),
                    "page_index": placement.page_index,
                    "x": placement.x,
                    "y": placement.y,
                },
            )
        except Exception as exc:
            self._abandon(pointer)
            self._fail(session, exc)
            raise

        self._move(session, CommitState.COMMITTED)
        session.annotation = None
        logger.info(
            "Document %s signed by %s: version %d (%s)",
            session.document_id, session.actor_id, version.version_number, pointer,
        )
        return CommitResult(version=version, placement=placement)

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _new_pointer(actor_id: str) -> str:
        return f"{actor_id}/{int(time.time() * 1000)}-{uuid4().hex}-signed.pdf"

    @staticmethod
    def _move(session: SigningSession, target: CommitState) -> None:
        logger.debug("Commit %s: %s -> %s", session.document_id, session.state.value, target.value)
        session.transition(target)

    def _enter_upload(self, session: SigningSession) -> None:
        logger.debug(
            "Commit %s: %s -> %s", session.document_id, session.state.value, CommitState.UPLOADING.value
        )
        if not session.begin_upload():
            exc = CommitCancelledError(f"Commit for document {session.document_id} cancelled")
            self._fail(session, exc)
            raise exc

    @staticmethod
    def _check_cancel(session: SigningSession) -> None:
        if session.cancel_requested:
            raise CommitCancelledError(f"Commit for document {session.document_id} cancelled")

    def _fail(self, session: SigningSession, exc: BaseException) -> None:
        logger.warning(
            "Commit %s failed in %s: %s: %s",
            session.document_id, session.state.value, type(exc).__name__, exc,
        )
        session.last_error = exc
        session.transition(CommitState.FAILED)

    def _abandon(self, pointer: str) -> None:
        """Mark the journal row; if even that fails, reconciliation picks it up."""
        try:
            self._repo.mark_journal(pointer, JournalState.ABANDONED)
        except StorageError:
            logger.exception("Could not mark %s abandoned; left pending for reconciliation", pointer)
