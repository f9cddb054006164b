"""Threaded comments on submissions between contributors and reviewers."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from reviewhub.core.logger import get_logger
from reviewhub.storage.db import acquire_connection
from reviewhub.storage.errors import FeatureUnavailableError, is_undefined_table
from reviewhub.storage.models import SubmissionComment, utcnow


logger = get_logger("reviewhub.comments")

AUTHOR_TYPES = ("user", "admin")
COMMENTS_UNAVAILABLE = "Comments feature not available. Please run database migration first."


def _unavailable(session: Session, exc: DBAPIError) -> FeatureUnavailableError:
    session.rollback()
    logger.warning("comments_table_missing", error=str(exc))
    return FeatureUnavailableError(COMMENTS_UNAVAILABLE)


def create_comment(
    session: Session,
    *,
    submission_id: str,
    author_email: str,
    author_type: str,
    comment_text: str,
    parent_comment_id: int | None = None,
) -> SubmissionComment:
    if author_type not in AUTHOR_TYPES:
        raise ValueError(f"Unknown comment author type: {author_type}")

    acquire_connection(session)
    now = utcnow()
    comment = SubmissionComment(
        submission_id=submission_id,
        author_email=author_email,
        author_type=author_type,
        comment_text=comment_text,
        parent_comment_id=parent_comment_id,
        created_at=now,
        updated_at=now,
    )
    try:
        session.add(comment)
        session.commit()
    except DBAPIError as exc:
        if is_undefined_table(exc):
            raise _unavailable(session, exc) from exc
        session.rollback()
        raise
    return comment


def list_comments(session: Session, submission_id: str) -> list[SubmissionComment]:
    """Comments oldest first; empty when the comments table is absent."""

    acquire_connection(session)
    try:
        return list(
            session.scalars(
                select(SubmissionComment)
                .where(SubmissionComment.submission_id == submission_id)
                .order_by(SubmissionComment.created_at.asc(), SubmissionComment.id.asc())
            ).all()
        )
    except DBAPIError as exc:
        if is_undefined_table(exc):
            _unavailable(session, exc)
            return []
        raise


def get_comment(session: Session, comment_id: int) -> Optional[SubmissionComment]:
    acquire_connection(session)
    try:
        return session.scalar(select(SubmissionComment).where(SubmissionComment.id == comment_id))
    except DBAPIError as exc:
        if is_undefined_table(exc):
            _unavailable(session, exc)
            return None
        raise


def update_comment(
    session: Session,
    comment_id: int,
    comment_text: str,
    author_email: str,
) -> Optional[SubmissionComment]:
    """Edit text; only the original author may do so."""

    acquire_connection(session)
    try:
        result = session.execute(
            update(SubmissionComment)
            .where(SubmissionComment.id == comment_id, SubmissionComment.author_email == author_email)
            .values(comment_text=comment_text, updated_at=utcnow())
        )
        session.commit()
    except DBAPIError as exc:
        if is_undefined_table(exc):
            raise _unavailable(session, exc) from exc
        session.rollback()
        raise
    if not result.rowcount:
        return None
    return session.scalar(
        select(SubmissionComment)
        .where(SubmissionComment.id == comment_id)
        .execution_options(populate_existing=True)
    )


def delete_comment(session: Session, comment_id: int, author_email: str, *, is_admin: bool = False) -> bool:
    """Authors delete their own comments; admins may delete any."""

    acquire_connection(session)
    stmt = delete(SubmissionComment).where(SubmissionComment.id == comment_id)
    if not is_admin:
        stmt = stmt.where(SubmissionComment.author_email == author_email)
    try:
        result = session.execute(stmt)
        session.commit()
    except DBAPIError as exc:
        if is_undefined_table(exc):
            raise _unavailable(session, exc) from exc
        session.rollback()
        raise
    return bool(result.rowcount)


def count_comments(session: Session, submission_id: str) -> int:
    acquire_connection(session)
    try:
        count = session.scalar(
            select(func.count())
            .select_from(SubmissionComment)
            .where(SubmissionComment.submission_id == submission_id)
        )
    except DBAPIError as exc:
        if is_undefined_table(exc):
            _unavailable(session, exc)
            return 0
        raise
    return int(count or 0)
