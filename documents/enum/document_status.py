"""Document status enumeration and the allowed transitions."""
from __future__ import annotations

from enum import Enum


class DocumentStatus(str, Enum):
    """Canonical document lifecycle statuses."""

    DRAFT = "draft"
    COMPLETED = "completed"
    REJECTED = "rejected"

    def can_transition_to(self, target: "DocumentStatus") -> bool:
        return target in _TRANSITIONS[self]


# Terminal statuses never change again.
_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.DRAFT: frozenset({DocumentStatus.COMPLETED, DocumentStatus.REJECTED}),
    DocumentStatus.COMPLETED: frozenset(),
    DocumentStatus.REJECTED: frozenset(),
}
