"""Per-user notification inbox."""

from __future__ import annotations

from contextlib import contextmanager
import secrets
import string
import time
from typing import Iterator, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from reviewhub.core.logger import get_logger
from reviewhub.storage.db import acquire_connection
from reviewhub.storage.errors import FeatureUnavailableError, is_undefined_table
from reviewhub.storage.models import Notification, utcnow
from reviewhub.submissions.lifecycle import (
    REJECTED_LIKE_STATUSES,
    STATUS_PENDING,
    VALIDATED_LIKE_STATUSES,
)


logger = get_logger("reviewhub.notifications")

NOTIFICATION_TYPES = ("success", "error", "info", "warning")
SUBMISSIONS_ACTION_URL = "/dashboard/submissions"
_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_notification_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"notif_{int(time.time() * 1000)}_{suffix}"


@contextmanager
def _notifications_table(session: Session) -> Iterator[None]:
    try:
        yield
    except DBAPIError as exc:
        if is_undefined_table(exc):
            session.rollback()
            raise FeatureUnavailableError(
                "Notifications feature not available. Please run database bootstrap first."
            ) from exc
        raise


def create_notification(
    session: Session,
    *,
    user_email: str,
    type: str,
    title: str,
    message: str,
    action_url: str | None = None,
) -> Notification:
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {type}")

    acquire_connection(session)
    now = utcnow()
    notification = Notification(
        id=new_notification_id(),
        user_email=user_email,
        type=type,
        title=title,
        message=message,
        action_url=action_url,
        read=False,
        created_at=now,
        updated_at=now,
    )
    with _notifications_table(session):
        session.add(notification)
        session.commit()
    return notification


def list_notifications(session: Session, user_email: str) -> list[Notification]:
    acquire_connection(session)
    with _notifications_table(session):
        return list(
            session.scalars(
                select(Notification)
                .where(Notification.user_email == user_email)
                .order_by(Notification.created_at.desc(), Notification.id.desc())
            ).all()
        )


def count_unread(session: Session, user_email: str) -> int:
    acquire_connection(session)
    with _notifications_table(session):
        count = session.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_email == user_email, Notification.read.is_(False))
        )
    return int(count or 0)


def mark_read(session: Session, notification_id: str, user_email: str) -> Optional[Notification]:
    """Mark one owned notification read; None when absent or owned by someone else."""

    acquire_connection(session)
    with _notifications_table(session):
        result = session.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_email == user_email)
            .values(read=True, updated_at=utcnow())
        )
        session.commit()
        if not result.rowcount:
            return None
        return session.scalar(
            select(Notification)
            .where(Notification.id == notification_id)
            .execution_options(populate_existing=True)
        )


def mark_all_read(session: Session, user_email: str) -> int:
    acquire_connection(session)
    with _notifications_table(session):
        result = session.execute(
            update(Notification)
            .where(Notification.user_email == user_email, Notification.read.is_(False))
            .values(read=True, updated_at=utcnow())
        )
        session.commit()
    return int(result.rowcount or 0)


def delete_notification(session: Session, notification_id: str, user_email: str) -> bool:
    acquire_connection(session)
    with _notifications_table(session):
        result = session.execute(
            delete(Notification).where(Notification.id == notification_id, Notification.user_email == user_email)
        )
        session.commit()
    return bool(result.rowcount)


def delete_all_notifications(session: Session, user_email: str) -> int:
    acquire_connection(session)
    with _notifications_table(session):
        result = session.execute(delete(Notification).where(Notification.user_email == user_email))
        session.commit()
    return int(result.rowcount or 0)


def status_notification_content(file_name: str, status: str, rejection_reason: str | None = None) -> tuple[str, str, str]:
    """Return ``(type, title, message)`` announcing a status change."""

    if status in VALIDATED_LIKE_STATUSES:
        return (
            "success",
            "Submission Validated",
            f'Your submission "{file_name}" has been successfully validated and approved.',
        )
    if status in REJECTED_LIKE_STATUSES:
        if rejection_reason:
            message = f'Your submission "{file_name}" was rejected: {rejection_reason}'
        else:
            message = f'Your submission "{file_name}" was rejected. Please review and resubmit.'
        return "error", "Submission Rejected", message
    if status == STATUS_PENDING:
        return (
            "warning",
            "Validation Pending",
            f'Your submission "{file_name}" is pending validation. Please check back later.',
        )
    return (
        "info",
        "Submission Updated",
        f'Your submission "{file_name}" status has been updated to {status}.',
    )


def create_status_notification(
    session: Session,
    *,
    user_email: str,
    submission_id: str,
    file_name: str,
    status: str,
    rejection_reason: str | None = None,
) -> Notification:
    type_, title, message = status_notification_content(file_name, status, rejection_reason)
    notification = create_notification(
        session,
        user_email=user_email,
        type=type_,
        title=title,
        message=message,
        action_url=SUBMISSIONS_ACTION_URL,
    )
    logger.info(
        "status_notification_created",
        submission_id=submission_id,
        status=status,
        notification_id=notification.id,
    )
    return notification
