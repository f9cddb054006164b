"""Reviewer decisions with their audit-log and notification side effects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reviewhub.admins.service import get_admin_by_email, log_admin_action
from reviewhub.core.logger import get_logger
from reviewhub.notifications.service import create_status_notification
from reviewhub.storage.errors import StorageError
from reviewhub.storage.models import Submission
from reviewhub.submissions.lifecycle import STATUS_REJECTED, STATUS_VALIDATED
from reviewhub.submissions.service import update_submission_status


logger = get_logger("reviewhub.review")

_ACTION_TYPES = {
    STATUS_VALIDATED: ("validate_submission", "Validated submission"),
    STATUS_REJECTED: ("reject_submission", "Rejected submission"),
}


@dataclass(frozen=True)
class ReviewRequestMeta:
    admin_email: Optional[str] = None
    ip_address: str = "unknown"
    user_agent: str = "unknown"


def _log_action(session: Session, submission: Submission, status: str, meta: ReviewRequestMeta) -> None:
    if not meta.admin_email:
        return
    try:
        admin = get_admin_by_email(session, meta.admin_email)
        if admin is None:
            logger.warning("review_admin_unknown", submission_id=submission.id)
            return
        action_type, verb = _ACTION_TYPES[status]
        log_admin_action(
            session,
            admin_id=admin.id,
            action_type=action_type,
            target_type="submission",
            target_id=submission.id,
            description=f"{verb}: {submission.file_name}",
            ip_address=meta.ip_address,
            user_agent=meta.user_agent,
        )
    except (SQLAlchemyError, StorageError) as exc:
        session.rollback()
        logger.warning("admin_action_log_failed", submission_id=submission.id, error=str(exc))


def _notify_owner(session: Session, submission: Submission, status: str) -> None:
    try:
        create_status_notification(
            session,
            user_email=submission.user_email,
            submission_id=submission.id,
            file_name=submission.file_name,
            status=status,
            rejection_reason=submission.rejection_reason,
        )
    except (SQLAlchemyError, StorageError) as exc:
        session.rollback()
        logger.warning("status_notification_failed", submission_id=submission.id, error=str(exc))


def apply_review_decision(
    session: Session,
    submission_id: str,
    status: str,
    meta: ReviewRequestMeta,
    *,
    rejection_reason: str | None = None,
    rejection_feedback: str | None = None,
) -> Optional[Submission]:
    """Validate or reject a submission.

    The status update is authoritative; the audit entry and the owner's
    notification are best-effort and never fail the decision.
    """

    if status not in _ACTION_TYPES:
        raise ValueError(f"Not a review decision: {status}")

    submission = update_submission_status(
        session,
        submission_id,
        status,
        rejection_reason=rejection_reason,
        rejection_feedback=rejection_feedback,
    )
    if submission is None:
        return None

    _log_action(session, submission, status, meta)
    _notify_owner(session, submission, status)
    return submission
