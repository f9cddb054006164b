"""Submission store: creation with entity fan-out, listings and status updates."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from reviewhub.core.config import get_settings
from reviewhub.core.logger import get_logger
from reviewhub.core.metrics import record_status_conflict, record_status_transition, record_submission_created
from reviewhub.media.stores import store_for_file_type
from reviewhub.storage.db import acquire_connection, disable_statement_timeout
from reviewhub.storage.errors import DuplicateRecordError, InvalidStatusTransitionError
from reviewhub.storage.models import Submission, User, as_utc, utcnow
from reviewhub.submissions.lifecycle import (
    FILE_TYPE_AUDIO,
    FILE_TYPE_DOCUMENT,
    FILE_TYPE_IMAGE,
    FILE_TYPE_VIDEO,
    LIST_KIND_PENDING,
    LIST_KIND_REJECTED,
    LIST_KIND_VALIDATED,
    LIST_KINDS,
    PENDING_LIKE_STATUSES,
    REJECTED_LIKE_STATUSES,
    STATUS_PENDING,
    VALIDATED_LIKE_STATUSES,
    allowed_sources,
    is_rejection,
    is_valid_status,
)
from reviewhub.users.service import ensure_user


logger = get_logger("reviewhub.submissions")

_SUMMARY_COLUMNS = (
    Submission.id,
    Submission.user_email,
    Submission.file_name,
    Submission.file_type,
    Submission.file_size,
    Submission.status,
    Submission.rejection_reason,
    Submission.rejection_feedback,
    Submission.created_at,
    Submission.updated_at,
)

_MIN_TICK = timedelta(microseconds=1)


def _list_limit(limit: int | None) -> int:
    return limit if limit is not None and limit > 0 else get_settings().submission_list_limit


def _reload(session: Session, submission_id: str) -> Optional[Submission]:
    return session.scalar(
        select(Submission).where(Submission.id == submission_id).execution_options(populate_existing=True)
    )


def create_submission(
    session: Session,
    *,
    submission_id: str,
    user_email: str,
    file_name: str,
    file_type: str,
    file_size: int,
    status: str | None = None,
    preview: str | None = None,
    **entity_fields: Any,
) -> Submission:
    """Persist a submission and, when a preview is given, its typed entity row.

    The owning user is upserted, the submission inserted and the entity row
    written in a single transaction; any failure rolls back all three.
    """

    initial_status = status or STATUS_PENDING
    if not is_valid_status(initial_status):
        raise ValueError(f"Unknown submission status: {initial_status}")

    acquire_connection(session)
    if session.scalar(select(Submission.id).where(Submission.id == submission_id)) is not None:
        raise DuplicateRecordError(f"Submission {submission_id} already exists")

    now = utcnow()
    submission = Submission(
        id=submission_id,
        user_email=user_email,
        file_name=file_name,
        file_type=file_type,
        file_size=file_size,
        status=initial_status,
        preview=preview or None,
        created_at=now,
        updated_at=now,
    )
    try:
        ensure_user(session, user_email)
        session.add(submission)
        session.flush()

        store = store_for_file_type(file_type) if preview else None
        if store is not None:
            store.create(session, submission, preview, commit=False, **entity_fields)

        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if session.scalar(select(Submission.id).where(Submission.id == submission_id)) is not None:
            raise DuplicateRecordError(f"Submission {submission_id} already exists") from exc
        logger.error("submission_create_failed", submission_id=submission_id, file_type=file_type, error=str(exc))
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("submission_create_failed", submission_id=submission_id, file_type=file_type, error=str(exc))
        raise

    record_submission_created(file_type=file_type)
    logger.info(
        "submission_created",
        submission_id=submission_id,
        file_type=file_type,
        status=initial_status,
        has_preview=bool(preview),
    )
    return submission


def get_submission(session: Session, submission_id: str) -> Optional[Submission]:
    acquire_connection(session)
    return _reload(session, submission_id)


def get_submission_with_details(session: Session, submission_id: str) -> Optional[tuple[Submission, Any]]:
    """Return ``(submission, entity_row_or_None)``."""

    submission = get_submission(session, submission_id)
    if submission is None:
        return None
    store = store_for_file_type(submission.file_type)
    entity = store.get_by_submission_id(session, submission_id) if store is not None else None
    return submission, entity


def get_user_submissions(session: Session, user_email: str, *, limit: int | None = None) -> list[Row]:
    """Owner's submissions newest first, without preview payloads."""

    acquire_connection(session)
    disable_statement_timeout(session)
    return list(
        session.execute(
            select(*_SUMMARY_COLUMNS)
            .where(Submission.user_email == user_email)
            .order_by(Submission.created_at.desc(), Submission.id.desc())
            .limit(_list_limit(limit))
        ).all()
    )


def get_submissions_by_type(session: Session, user_email: str, file_type: str) -> list[Row]:
    acquire_connection(session)
    return list(
        session.execute(
            select(*_SUMMARY_COLUMNS)
            .where(Submission.user_email == user_email, Submission.file_type == file_type)
            .order_by(Submission.created_at.desc(), Submission.id.desc())
        ).all()
    )


def get_user_submission_stats(session: Session, user_email: str) -> dict[str, int]:
    acquire_connection(session)
    rows = session.execute(
        select(Submission.file_type, func.count())
        .where(Submission.user_email == user_email)
        .group_by(Submission.file_type)
    ).all()
    by_type = {file_type: int(count) for file_type, count in rows}
    return {
        "total": sum(by_type.values()),
        "images": by_type.get(FILE_TYPE_IMAGE, 0),
        "videos": by_type.get(FILE_TYPE_VIDEO, 0),
        "audios": by_type.get(FILE_TYPE_AUDIO, 0),
        "documents": by_type.get(FILE_TYPE_DOCUMENT, 0),
    }


def list_submissions_by_status(session: Session, kind: str, *, limit: int | None = None) -> list[Row]:
    """Review listings: pending-like oldest first, decided ones newest first."""

    if kind not in LIST_KINDS:
        raise ValueError(f"Unknown submission list kind: {kind}")
    statuses, oldest_first = LIST_KINDS[kind]
    ordering = (
        (Submission.created_at.asc(), Submission.id.asc())
        if oldest_first
        else (Submission.created_at.desc(), Submission.id.desc())
    )

    acquire_connection(session)
    return list(
        session.execute(
            select(*_SUMMARY_COLUMNS)
            .where(Submission.status.in_(statuses))
            .order_by(*ordering)
            .limit(_list_limit(limit))
        ).all()
    )


def get_pending_submissions(session: Session, *, limit: int | None = None) -> list[Row]:
    return list_submissions_by_status(session, LIST_KIND_PENDING, limit=limit)


def get_validated_submissions(session: Session, *, limit: int | None = None) -> list[Row]:
    return list_submissions_by_status(session, LIST_KIND_VALIDATED, limit=limit)


def get_rejected_submissions(session: Session, *, limit: int | None = None) -> list[Row]:
    return list_submissions_by_status(session, LIST_KIND_REJECTED, limit=limit)


def delete_submission(session: Session, submission_id: str, owner_email: str) -> bool:
    """Delete an owned submission and its entity row; False if absent or not owned."""

    acquire_connection(session)
    file_type = session.scalar(
        select(Submission.file_type).where(Submission.id == submission_id, Submission.user_email == owner_email)
    )
    if file_type is None:
        session.rollback()
        return False

    store = store_for_file_type(file_type)
    if store is not None:
        try:
            with session.begin_nested():
                store.delete_by_submission_id(session, submission_id)
        except SQLAlchemyError as exc:
            logger.warning(
                "submission_entity_delete_failed",
                submission_id=submission_id,
                file_type=file_type,
                error=str(exc),
            )

    result = session.execute(
        delete(Submission).where(Submission.id == submission_id, Submission.user_email == owner_email)
    )
    session.commit()
    deleted = bool(result.rowcount)
    if deleted:
        logger.info("submission_deleted", submission_id=submission_id, file_type=file_type)
    return deleted


def update_submission_status(
    session: Session,
    submission_id: str,
    status: str,
    *,
    rejection_reason: str | None = None,
    rejection_feedback: str | None = None,
) -> Optional[Submission]:
    """Move a submission to ``status`` as one conditional UPDATE.

    ``updated_at`` always advances past its previous value, even when the
    status is unchanged. Rejecting stores reason and feedback; any other
    status clears them. Returns None for an unknown id and raises
    InvalidStatusTransitionError when the current status forbids the move.
    """

    if not is_valid_status(status):
        raise ValueError(f"Unknown submission status: {status}")

    enforce = get_settings().enforce_status_transitions
    acquire_connection(session)
    current = session.execute(
        select(Submission.status, Submission.updated_at).where(Submission.id == submission_id)
    ).one_or_none()
    if current is None:
        return None

    previous_updated_at = as_utc(current.updated_at)
    updated_at = max(utcnow(), previous_updated_at + _MIN_TICK)
    values: dict[str, Any] = {"status": status, "updated_at": updated_at}
    if is_rejection(status):
        values["rejection_reason"] = rejection_reason
        values["rejection_feedback"] = rejection_feedback
    else:
        values["rejection_reason"] = None
        values["rejection_feedback"] = None

    result = session.execute(
        update(Submission)
        .where(
            Submission.id == submission_id,
            Submission.status.in_(allowed_sources(status, enforce=enforce)),
        )
        .values(**values)
    )
    if not result.rowcount:
        session.rollback()
        latest_status = session.scalar(select(Submission.status).where(Submission.id == submission_id))
        if latest_status is None:
            return None
        record_status_conflict(to_status=status)
        logger.warning(
            "submission_status_transition_refused",
            submission_id=submission_id,
            current_status=latest_status,
            requested_status=status,
        )
        raise InvalidStatusTransitionError(submission_id, latest_status, status)

    session.commit()
    record_status_transition(from_status=current.status, to_status=status)
    logger.info(
        "submission_status_updated",
        submission_id=submission_id,
        from_status=current.status,
        to_status=status,
    )
    return _reload(session, submission_id)


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def get_admin_stats(session: Session, *, recent_limit: int = 10, trend_days: int = 7) -> dict[str, Any]:
    """Dashboard counters for reviewers."""

    acquire_connection(session)
    now = datetime.now(timezone.utc)
    today = _start_of_day(now)
    trend_start = today - timedelta(days=trend_days)

    totals = session.execute(
        select(
            func.count(),
            func.count().filter(Submission.status.in_(PENDING_LIKE_STATUSES)),
            func.count().filter(Submission.status.in_(VALIDATED_LIKE_STATUSES)),
            func.count().filter(Submission.status.in_(REJECTED_LIKE_STATUSES)),
            func.count().filter(Submission.created_at >= today),
        ).select_from(Submission)
    ).one()
    total, pending, validated, rejected, today_count = (int(value or 0) for value in totals)

    total_users = int(session.scalar(select(func.count()).select_from(User)) or 0)

    recent = session.execute(
        select(
            Submission.id,
            Submission.file_name,
            Submission.file_type,
            Submission.file_size,
            Submission.user_email,
            Submission.status,
            Submission.created_at,
        )
        .order_by(Submission.created_at.desc(), Submission.id.desc())
        .limit(recent_limit)
    ).all()

    file_type_rows = session.execute(
        select(Submission.file_type, func.count()).group_by(Submission.file_type).order_by(Submission.file_type)
    ).all()

    per_day: dict[str, int] = defaultdict(int)
    for created_at in session.scalars(select(Submission.created_at).where(Submission.created_at >= trend_start)):
        per_day[as_utc(created_at).date().isoformat()] += 1

    return {
        "total_submissions": total,
        "pending_submissions": pending,
        "validated_submissions": validated,
        "rejected_submissions": rejected,
        "total_volunteers": total_users,
        "today_submissions": today_count,
        "validation_queue": pending,
        "recent_submissions": [row._asdict() for row in recent],
        "file_type_stats": [{"type": file_type, "count": int(count)} for file_type, count in file_type_rows],
        "weekly_trend": [{"date": day, "count": per_day[day]} for day in sorted(per_day)],
    }
