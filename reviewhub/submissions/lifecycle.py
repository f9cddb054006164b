"""Submission statuses, list groupings and the review transition table."""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple


STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_SUBMITTED = "submitted"
STATUS_VALIDATED = "validated"
STATUS_SUCCESSFUL = "successful"
STATUS_REJECTED = "rejected"
STATUS_FAILED = "failed"

ALL_STATUSES: Tuple[str, ...] = (
    STATUS_PENDING,
    STATUS_PROCESSING,
    STATUS_SUBMITTED,
    STATUS_VALIDATED,
    STATUS_SUCCESSFUL,
    STATUS_REJECTED,
    STATUS_FAILED,
)

PENDING_LIKE_STATUSES: Tuple[str, ...] = (STATUS_PENDING, STATUS_PROCESSING, STATUS_SUBMITTED)
VALIDATED_LIKE_STATUSES: Tuple[str, ...] = (STATUS_VALIDATED, STATUS_SUCCESSFUL)
REJECTED_LIKE_STATUSES: Tuple[str, ...] = (STATUS_REJECTED, STATUS_FAILED)

LIST_KIND_PENDING = "pending"
LIST_KIND_VALIDATED = "validated"
LIST_KIND_REJECTED = "rejected"

# kind -> (statuses, oldest_first)
LIST_KINDS: Dict[str, Tuple[Tuple[str, ...], bool]] = {
    LIST_KIND_PENDING: (PENDING_LIKE_STATUSES, True),
    LIST_KIND_VALIDATED: (VALIDATED_LIKE_STATUSES, False),
    LIST_KIND_REJECTED: (REJECTED_LIKE_STATUSES, False),
}

FILE_TYPE_IMAGE = "image"
FILE_TYPE_VIDEO = "video"
FILE_TYPE_AUDIO = "audio"
FILE_TYPE_DOCUMENT = "document"
FILE_TYPES: Tuple[str, ...] = (FILE_TYPE_IMAGE, FILE_TYPE_VIDEO, FILE_TYPE_AUDIO, FILE_TYPE_DOCUMENT)

_REOPEN_TARGETS = frozenset({STATUS_PENDING, STATUS_SUBMITTED})

# A decision is final once taken: validated rows may only be promoted to
# successful, rejected rows may only be marked failed or reopened.
TRANSITIONS: Dict[str, FrozenSet[str]] = {
    STATUS_PENDING: frozenset(ALL_STATUSES),
    STATUS_PROCESSING: frozenset(ALL_STATUSES),
    STATUS_SUBMITTED: frozenset(ALL_STATUSES),
    STATUS_VALIDATED: frozenset({STATUS_VALIDATED, STATUS_SUCCESSFUL}),
    STATUS_SUCCESSFUL: frozenset({STATUS_SUCCESSFUL, STATUS_VALIDATED}),
    STATUS_REJECTED: frozenset({STATUS_REJECTED, STATUS_FAILED}) | _REOPEN_TARGETS,
    STATUS_FAILED: frozenset({STATUS_FAILED, STATUS_REJECTED}) | _REOPEN_TARGETS,
}


def is_valid_status(status: str | None) -> bool:
    return status in ALL_STATUSES


def is_rejection(status: str) -> bool:
    return status == STATUS_REJECTED


def is_transition_allowed(current: str, new: str, *, enforce: bool = True) -> bool:
    if new not in ALL_STATUSES:
        return False
    if not enforce or current == new:
        return True
    return new in TRANSITIONS.get(current, frozenset())


def allowed_sources(new: str, *, enforce: bool = True) -> Tuple[str, ...]:
    """Statuses a row may currently hold for a move to ``new`` to succeed."""

    if not enforce:
        return ALL_STATUSES
    return tuple(status for status in ALL_STATUSES if is_transition_allowed(status, new))
