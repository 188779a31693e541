"""
documents/tests/test_signing_service.py

Commit protocol: composite -> upload -> one transaction, with failure,
cancellation and concurrent-signer behaviour.
"""

from __future__ import annotations

import sqlite3
import threading
import unittest
from io import BytesIO
from unittest import mock

from pypdf import PdfReader

from core.config.config_service import SigningConfig
from documents.dto.audit_event import AuditAction
from documents.enum.document_status import DocumentStatus
from documents.exceptions.errors import (
    CommitCancelledError,
    ConcurrencyError,
    PageIndexError,
    PersistenceError,
    PlacementError,
    StorageError,
    ValidationError,
)
from documents.models.signing_session import CommitState, InvalidTransitionError
from documents.services.signing_service import SigningService
from documents.tests.support import RepositoryTestCase
from signature.models.annotation import Annotation
from signature.models.signature_enums import FontFamily


class TestSigningService(RepositoryTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service = SigningService(repository=self.repo, storage=self.storage)
        self.doc = self.upload()
        self.john = Annotation(x=50, y=50, text="John Doe", font_family=FontFamily.SERIF, font_size=24)

    # ------------------------------------------------------------------ #
    def _versions(self) -> list[int]:
        return [v.version_number for v in self.repo.versions(self.doc.doc_id)]

    def _actions(self) -> list[AuditAction]:
        return [e.action for e in self.repo.audit_history(self.doc.doc_id, newest_first=False)]

    def _journal(self) -> list[str]:
        return [r["state"] for r in self.journal_rows()]

    def _sign_once(self, actor: str = "bob", text: str = "John Doe"):
        session = self.service.open_session(self.doc.doc_id, actor, self.john.with_text(text))
        return self.service.commit(session)

    # ------------------------------------------------------------------ #
    def test_sign_letter_page(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        self.assertEqual((session.expected_version, session.render_width), (1, 600.0))

        result = self.service.commit(session)

        self.assertEqual(result.version_number, 2)
        self.assertAlmostEqual(result.placement.scale, 1.02)
        self.assertAlmostEqual(result.placement.font_size, 24.48)
        self.assertAlmostEqual(result.placement.x, 51.0)
        self.assertAlmostEqual(result.placement.y, 716.52)
        self.assertEqual(self._versions(), [1, 2])
        self.assertEqual(self.repo.require(self.doc.doc_id).status, DocumentStatus.COMPLETED)
        self.assertEqual(self._actions(), [AuditAction.CREATED, AuditAction.SIGNED])
        self.assertEqual(self._journal(), ["committed"])

        self.assertEqual(
            session.history,
            [CommitState.DRAFTING, CommitState.COMPOSITING, CommitState.UPLOADING,
             CommitState.PERSISTING, CommitState.COMMITTED],
        )
        self.assertIsNone(session.annotation)

        signed = self.repo.audit_history(self.doc.doc_id)[0]
        self.assertIn("John Doe", signed.details)
        self.assertEqual(signed.data["text"], "John Doe")
        self.assertEqual(signed.data["font_family"], "serif")
        self.assertEqual(signed.data["color"], "#000000")
        self.assertEqual(signed.data["version_number"], 2)

        text = PdfReader(BytesIO(self.storage.get(result.file_path))).pages[0].extract_text()
        self.assertIn("John Doe", text)
        self.assertIn("Service Agreement", text)
        # version 1 is untouched
        v1 = self.repo.versions(self.doc.doc_id)[0]
        self.assertNotIn("John Doe", PdfReader(BytesIO(self.storage.get(v1.file_path))).pages[0].extract_text())

    def test_commit_without_annotation(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        session.remove_annotation()
        with self.assertRaises(ValidationError):
            self.service.commit(session)
        self.assertEqual(session.state, CommitState.DRAFTING)
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self._journal(), [])
        self.assertEqual(self.repo.require(self.doc.doc_id).status, DocumentStatus.DRAFT)

    def test_second_page_is_not_supported(self) -> None:
        service = SigningService(repository=self.repo, storage=self.storage,
                                 signing=SigningConfig(target_page=1))
        session = service.open_session(self.doc.doc_id, "bob", self.john)
        with self.assertRaises(PageIndexError):
            service.commit(session)
        self.assertEqual(session.state, CommitState.FAILED)
        self.assertIsInstance(session.last_error, PageIndexError)
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self._journal(), [])

    def test_out_of_page_annotation_writes_nothing(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john.moved_by(500, 0))
        with self.assertRaises(PlacementError):
            self.service.commit(session)
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self._journal(), [])

    def test_non_finite_annotation_fails_before_any_write(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john.moved_by(float("nan"), 0))
        with self.assertRaises(PlacementError):
            self.service.commit(session)
        self.assertEqual(session.state, CommitState.FAILED)
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self._journal(), [])

    def test_stale_session_loses(self) -> None:
        self._sign_once("bob", "Bob")
        self._sign_once("carol", "Carol")
        self.assertEqual(self._versions(), [1, 2, 3])

        first = self.service.open_session(self.doc.doc_id, "dave", self.john.with_text("Dave"))
        second = self.service.open_session(self.doc.doc_id, "erin", self.john.with_text("Erin"))
        self.assertEqual(self.service.commit(first).version_number, 4)

        with self.assertRaises(ConcurrencyError) as ctx:
            self.service.commit(second)
        self.assertEqual((ctx.exception.expected, ctx.exception.actual), (3, 4))
        self.assertEqual(second.state, CommitState.FAILED)
        self.assertEqual(self._versions(), [1, 2, 3, 4])
        self.assertEqual(self._actions().count(AuditAction.SIGNED), 3)
        self.assertEqual(self._journal(), ["committed", "committed", "committed", "abandoned"])

        # rebase onto version 4 and try again
        self.service.rebase(second)
        self.assertEqual(second.expected_version, 4)
        second.set_annotation(self.john.with_text("Erin"))
        self.assertEqual(self.service.commit(second).version_number, 5)

    def test_parallel_commits_one_winner(self) -> None:
        sessions = [
            self.service.open_session(self.doc.doc_id, actor, self.john.with_text(actor))
            for actor in ("bob", "carol", "dave")
        ]
        barrier = threading.Barrier(len(sessions))
        outcomes: dict[str, object] = {}

        def run(session) -> None:
            barrier.wait()
            try:
                outcomes[session.actor_id] = self.service.commit(session).version_number
            except ConcurrencyError as exc:
                outcomes[session.actor_id] = exc

        threads = [threading.Thread(target=run, args=(s,)) for s in sessions]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        winners = [v for v in outcomes.values() if v == 2]
        losers = [v for v in outcomes.values() if isinstance(v, ConcurrencyError)]
        self.assertEqual((len(winners), len(losers)), (1, 2))
        self.assertEqual(self._versions(), [1, 2])
        self.assertEqual(self._actions().count(AuditAction.SIGNED), 1)

    def test_cancel_before_upload(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        self.assertTrue(session.cancel())
        with self.assertRaises(CommitCancelledError):
            self.service.commit(session)
        self.assertEqual(session.state, CommitState.FAILED)
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self._journal(), [])

        # retry clears the cancellation
        self.assertEqual(self.service.commit(session).version_number, 2)

    def test_cancel_right_before_upload_is_honoured(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        real_begin = session.begin_upload
        answers: list[bool] = []

        def begin_upload() -> bool:
            answers.append(session.cancel())
            return real_begin()

        with mock.patch.object(session, "begin_upload", side_effect=begin_upload):
            with self.assertRaises(CommitCancelledError):
                self.service.commit(session)

        self.assertEqual(answers, [True])
        self.assertEqual(session.state, CommitState.FAILED)
        self.assertNotIn(CommitState.UPLOADING, session.history)
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self._journal(), [])

    def test_accepted_cancel_always_wins(self) -> None:
        committed = 0
        for _ in range(20):
            session = self.service.open_session(self.doc.doc_id, "bob", self.john)
            accepted: list[bool] = []
            canceller = threading.Thread(target=lambda s=session: accepted.append(s.cancel()))
            canceller.start()
            try:
                self.service.commit(session)
            except CommitCancelledError:
                pass
            canceller.join(timeout=10)

            expected = CommitState.FAILED if accepted == [True] else CommitState.COMMITTED
            self.assertEqual(session.state, expected)
            committed += session.state == CommitState.COMMITTED

        self.assertEqual(len(self._versions()), 1 + committed)
        self.assertEqual(self._actions().count(AuditAction.SIGNED), committed)

    def test_cancel_during_upload_is_refused(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        real_put = self.storage.put
        answers: list[bool] = []

        def put(pointer, data, content_type="application/pdf"):
            answers.append(session.cancel())
            return real_put(pointer, data, content_type)

        with mock.patch.object(self.storage, "put", side_effect=put):
            result = self.service.commit(session)

        self.assertEqual(answers, [False])
        self.assertEqual(result.version_number, 2)
        self.assertEqual(session.state, CommitState.COMMITTED)

    def test_upload_failure(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        with mock.patch.object(self.storage, "put", side_effect=OSError("disk full")):
            with self.assertRaises(StorageError) as ctx:
                self.service.commit(session)
        self.assertIsNotNone(ctx.exception.pointer)
        self.assertEqual(session.state, CommitState.FAILED)
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self._actions(), [AuditAction.CREATED])
        self.assertEqual(self._journal(), ["abandoned"])

        self.assertEqual(self.service.commit(session).version_number, 2)

    def test_persist_failure_rolls_back(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        with mock.patch(
            "documents.repository.sqlite_document_repository.AuditLog.write",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            with self.assertRaises(PersistenceError) as ctx:
                self.service.commit(session)

        pointer = ctx.exception.pointer
        self.assertTrue(self.storage.exists(pointer))
        self.assertIsNone(self.repo.version_by_file_path(pointer))
        self.assertEqual(self._versions(), [1])
        self.assertEqual(self.repo.require(self.doc.doc_id).status, DocumentStatus.DRAFT)
        self.assertEqual(self._actions(), [AuditAction.CREATED])
        self.assertEqual(self._journal(), ["abandoned"])

    def test_one_commit_per_session_at_a_time(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        real_put = self.storage.put
        nested: list[BaseException] = []

        def put(pointer, data, content_type="application/pdf"):
            try:
                self.service.commit(session)
            except ConcurrencyError as exc:
                nested.append(exc)
            return real_put(pointer, data, content_type)

        with mock.patch.object(self.storage, "put", side_effect=put):
            self.service.commit(session)

        self.assertEqual(len(nested), 1)
        self.assertEqual(self._versions(), [1, 2])

    def test_committed_session_is_closed(self) -> None:
        session = self.service.open_session(self.doc.doc_id, "bob", self.john)
        self.service.commit(session)
        with self.assertRaises(ValidationError):
            self.service.commit(session)
        with self.assertRaises(InvalidTransitionError):
            session.set_annotation(self.john)
        self.assertFalse(session.cancel())


if __name__ == "__main__":
    unittest.main()
