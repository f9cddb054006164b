"""Typed storage errors and driver error classification."""

from __future__ import annotations

from sqlalchemy.exc import DBAPIError


UNDEFINED_TABLE_SQLSTATE = "42P01"


class StorageError(Exception):
    """Base class for storage-layer failures the HTTP layer maps explicitly."""


class DatabaseUnavailableError(StorageError):
    """Raised when a connection could not be acquired after retries."""


class FeatureUnavailableError(StorageError):
    """Raised when a backing table for an optional feature is missing."""


class DuplicateRecordError(StorageError):
    """Raised when a record with the same natural key already exists."""


class InvalidStatusTransitionError(StorageError):
    def __init__(self, submission_id: str, current_status: str, requested_status: str) -> None:
        super().__init__(
            f"Submission {submission_id} cannot move from '{current_status}' to '{requested_status}'"
        )
        self.submission_id = submission_id
        self.current_status = current_status
        self.requested_status = requested_status


def _sqlstate(exc: BaseException) -> str | None:
    original = getattr(exc, "orig", None)
    for candidate in (original, exc):
        code = getattr(candidate, "pgcode", None) or getattr(candidate, "sqlstate", None)
        if code:
            return str(code)
    return None


def is_undefined_table(exc: BaseException) -> bool:
    """True when the driver reports a missing relation.

    PostgreSQL exposes SQLSTATE 42P01; SQLite has no SQLSTATE and reports
    ``no such table`` through OperationalError.
    """

    if not isinstance(exc, DBAPIError):
        return False
    if _sqlstate(exc) == UNDEFINED_TABLE_SQLSTATE:
        return True
    return "no such table" in str(getattr(exc, "orig", "") or "").lower()
