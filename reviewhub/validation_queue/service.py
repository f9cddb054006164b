"""Per-reviewer validation queue."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reviewhub.core.logger import get_logger
from reviewhub.core.metrics import record_queue_operation
from reviewhub.storage.db import acquire_connection
from reviewhub.storage.models import Submission, ValidationQueueItem, utcnow
from reviewhub.storage.upsert import dialect_insert


logger = get_logger("reviewhub.validation_queue")

QUEUE_STATUS_PENDING = "pending"
QUEUE_STATUS_IN_PROGRESS = "in_progress"
QUEUE_STATUS_COMPLETED = "completed"
QUEUE_STATUS_CANCELLED = "cancelled"
QUEUE_STATUSES = (QUEUE_STATUS_PENDING, QUEUE_STATUS_IN_PROGRESS, QUEUE_STATUS_COMPLETED, QUEUE_STATUS_CANCELLED)
OPEN_QUEUE_STATUSES = (QUEUE_STATUS_PENDING, QUEUE_STATUS_IN_PROGRESS)


class UnknownSubmissionError(LookupError):
    def __init__(self, submission_ids: Iterable[str]) -> None:
        self.submission_ids = sorted(set(submission_ids))
        super().__init__(f"Unknown submission id(s): {', '.join(self.submission_ids)}")


def _dedupe(submission_ids: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for submission_id in submission_ids:
        seen.setdefault(submission_id, None)
    return list(seen)


def _upsert_pending(session: Session, submission_id: str, admin_email: str) -> None:
    now = utcnow()
    stmt = dialect_insert(session, ValidationQueueItem).values(
        submission_id=submission_id,
        admin_email=admin_email,
        status=QUEUE_STATUS_PENDING,
        created_at=now,
        updated_at=now,
    )
    session.execute(
        stmt.on_conflict_do_update(
            index_elements=["submission_id", "admin_email"],
            set_={"status": QUEUE_STATUS_PENDING, "updated_at": now},
        )
    )


def _items(session: Session, submission_ids: list[str], admin_email: str) -> list[ValidationQueueItem]:
    return list(
        session.scalars(
            select(ValidationQueueItem)
            .where(
                ValidationQueueItem.submission_id.in_(submission_ids),
                ValidationQueueItem.admin_email == admin_email,
            )
            .order_by(ValidationQueueItem.id.asc())
            .execution_options(populate_existing=True)
        ).all()
    )


def enqueue_bulk(session: Session, submission_ids: Iterable[str], admin_email: str) -> list[ValidationQueueItem]:
    """Queue every id for ``admin_email`` in one transaction; all or nothing.

    Re-queueing an existing entry resets it to pending.
    """

    ids = _dedupe(submission_ids)
    if not ids:
        return []

    acquire_connection(session)
    known = set(session.scalars(select(Submission.id).where(Submission.id.in_(ids))).all())
    missing = [submission_id for submission_id in ids if submission_id not in known]
    if missing:
        session.rollback()
        raise UnknownSubmissionError(missing)

    try:
        for submission_id in ids:
            _upsert_pending(session, submission_id, admin_email)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.warning("validation_queue_enqueue_failed", admin_email=admin_email, count=len(ids), error=str(exc))
        raise UnknownSubmissionError(ids) from exc

    record_queue_operation(operation="enqueue", count=len(ids))
    logger.info("validation_queue_enqueued", admin_email=admin_email, count=len(ids))
    return _items(session, ids, admin_email)


def enqueue(session: Session, submission_id: str, admin_email: str) -> ValidationQueueItem:
    items = enqueue_bulk(session, [submission_id], admin_email)
    return items[0]


def list_queue(session: Session, admin_email: str) -> list[ValidationQueueItem]:
    """Open entries for one reviewer, oldest first."""

    acquire_connection(session)
    return list(
        session.scalars(
            select(ValidationQueueItem)
            .where(
                ValidationQueueItem.admin_email == admin_email,
                ValidationQueueItem.status.in_(OPEN_QUEUE_STATUSES),
            )
            .order_by(ValidationQueueItem.created_at.asc(), ValidationQueueItem.id.asc())
        ).all()
    )


def get_queue_item(session: Session, submission_id: str, admin_email: str) -> Optional[ValidationQueueItem]:
    acquire_connection(session)
    return session.scalar(
        select(ValidationQueueItem)
        .where(
            ValidationQueueItem.submission_id == submission_id,
            ValidationQueueItem.admin_email == admin_email,
        )
        .execution_options(populate_existing=True)
    )


def _set_status(session: Session, submission_ids: list[str], admin_email: str, status: str) -> int:
    result = session.execute(
        update(ValidationQueueItem)
        .where(
            ValidationQueueItem.submission_id.in_(submission_ids),
            ValidationQueueItem.admin_email == admin_email,
        )
        .values(status=status, updated_at=utcnow())
    )
    return int(result.rowcount or 0)


def update_queue_status(
    session: Session,
    submission_id: str,
    admin_email: str,
    status: str,
) -> Optional[ValidationQueueItem]:
    if status not in QUEUE_STATUSES:
        raise ValueError(f"Unknown validation queue status: {status}")

    acquire_connection(session)
    updated = _set_status(session, [submission_id], admin_email, status)
    session.commit()
    if not updated:
        return None
    record_queue_operation(operation=f"status_{status}")
    return _items(session, [submission_id], admin_email)[0]


def dequeue(session: Session, submission_id: str, admin_email: str) -> bool:
    """Mark the entry completed; False when the reviewer had no such entry."""

    return dequeue_bulk(session, [submission_id], admin_email) > 0


def dequeue_bulk(session: Session, submission_ids: Iterable[str], admin_email: str) -> int:
    ids = _dedupe(submission_ids)
    if not ids:
        return 0

    acquire_connection(session)
    try:
        count = _set_status(session, ids, admin_email, QUEUE_STATUS_COMPLETED)
        session.commit()
    except Exception:
        session.rollback()
        raise

    record_queue_operation(operation="dequeue", count=count)
    logger.info("validation_queue_dequeued", admin_email=admin_email, count=count)
    return count
