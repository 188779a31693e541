"""
Signing session: the explicit state of one editor session on one document.

The editor owns exactly one session per open document and hands it to
``SigningService.commit``; nothing about the pending annotation lives in
global state. States::

    DRAFTING -> COMPOSITING -> UPLOADING -> PERSISTING -> COMMITTED
         \\______________\\____________\\____________\\-> FAILED -> DRAFTING (retry)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from documents.dto.document_version import DocumentVersion
from signature.models.annotation import Annotation
from signature.models.signature_placement import DocumentPlacement


class CommitState(str, Enum):
    DRAFTING = "drafting"
    COMPOSITING = "compositing"
    UPLOADING = "uploading"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    FAILED = "failed"


_ALLOWED: dict[CommitState, frozenset[CommitState]] = {
    CommitState.DRAFTING: frozenset({CommitState.COMPOSITING, CommitState.FAILED}),
    CommitState.COMPOSITING: frozenset({CommitState.UPLOADING, CommitState.FAILED}),
    CommitState.UPLOADING: frozenset({CommitState.PERSISTING, CommitState.FAILED}),
    CommitState.PERSISTING: frozenset({CommitState.COMMITTED, CommitState.FAILED}),
    CommitState.COMMITTED: frozenset(),
    CommitState.FAILED: frozenset({CommitState.DRAFTING}),
}

# Cancellation is honoured only while nothing has been written.
CANCELLABLE_STATES = frozenset({CommitState.DRAFTING, CommitState.COMPOSITING})


class InvalidTransitionError(RuntimeError):
    """Programming error: the commit protocol skipped or repeated a state."""


@dataclass
class SigningSession:
    document_id: str
    actor_id: str
    base_file_path: str
    expected_version: int
    render_width: float
    page_index: int = 0
    annotation: Optional[Annotation] = None
    state: CommitState = CommitState.DRAFTING
    history: List[CommitState] = field(default_factory=lambda: [CommitState.DRAFTING])
    last_error: Optional[BaseException] = None
    _cancel: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _commit_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _state_lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    # ---------------- editing ----------------
    def set_annotation(self, annotation: Annotation) -> None:
        self._require_editable()
        self.annotation = annotation

    def remove_annotation(self) -> None:
        self._require_editable()
        self.annotation = None

    def _require_editable(self) -> None:
        if self.state not in (CommitState.DRAFTING, CommitState.FAILED):
            raise InvalidTransitionError(f"annotation cannot change while {self.state.value}")

    # ---------------- cancellation ----------------
    def cancel(self) -> bool:
        """
        Request cancellation. Returns False once uploading has begun, in
        which case the commit runs to COMMITTED or FAILED regardless.
        """
        with self._state_lock:
            if self.state not in CANCELLABLE_STATES:
                return False
            self._cancel.set()
            return True

    @property
    def cancel_requested(self) -> bool:
        return self._cancel.is_set()

    # ---------------- state machine ----------------
    @property
    def is_terminal(self) -> bool:
        return self.state in (CommitState.COMMITTED, CommitState.FAILED)

    def transition(self, target: CommitState) -> None:
        with self._state_lock:
            if target not in _ALLOWED[self.state]:
                raise InvalidTransitionError(f"{self.state.value} -> {target.value}")
            if target == CommitState.DRAFTING:
                self._cancel.clear()
                self.last_error = None
            self.state = target
            self.history.append(target)

    def begin_upload(self) -> bool:
        """
        COMPOSITING -> UPLOADING, unless cancellation was requested.

        Runs under the same lock as :meth:`cancel`, so a cancel either lands
        before this point (and is honoured) or after it (and returns False).
        """
        with self._state_lock:
            if self._cancel.is_set():
                return False
            self.transition(CommitState.UPLOADING)
            return True


@dataclass(frozen=True)
class CommitResult:
    version: DocumentVersion
    placement: DocumentPlacement

    @property
    def document_id(self) -> str:
        return self.version.document_id

    @property
    def version_number(self) -> int:
        return self.version.version_number

    @property
    def file_path(self) -> str:
        return self.version.file_path
