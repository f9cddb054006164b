"""Submission comment API routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from reviewhub.comments.service import create_comment, delete_comment, list_comments, update_comment
from reviewhub.schemas.comment import CommentCreateRequest, CommentResponse, CommentUpdateRequest
from reviewhub.storage.db import get_session
from reviewhub.submissions.service import get_submission


router = APIRouter(prefix="/api/submissions/{submission_id}/comments", tags=["comments"])


@router.get("", response_model=list[CommentResponse])
def read_comments(submission_id: str, session: Session = Depends(get_session)) -> list[CommentResponse]:
    return [CommentResponse.model_validate(comment) for comment in list_comments(session, submission_id)]


@router.post("", response_model=CommentResponse, status_code=201)
def add_comment(
    submission_id: str,
    payload: CommentCreateRequest,
    session: Session = Depends(get_session),
) -> CommentResponse:
    if get_submission(session, submission_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    comment = create_comment(
        session,
        submission_id=submission_id,
        author_email=payload.author_email,
        author_type=payload.author_type,
        comment_text=payload.comment_text,
        parent_comment_id=payload.parent_comment_id,
    )
    return CommentResponse.model_validate(comment)


@router.put("", response_model=CommentResponse)
def edit_comment(
    submission_id: str,
    payload: CommentUpdateRequest,
    session: Session = Depends(get_session),
) -> CommentResponse:
    del submission_id
    comment = update_comment(session, payload.comment_id, payload.comment_text, payload.author_email)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found or unauthorized")
    return CommentResponse.model_validate(comment)


@router.delete("")
def remove_comment(
    submission_id: str,
    comment_id: Optional[int] = Query(default=None, alias="commentId"),
    author_email: Optional[str] = Query(default=None, alias="authorEmail"),
    is_admin: bool = Query(default=False, alias="isAdmin"),
    session: Session = Depends(get_session),
) -> dict[str, bool]:
    del submission_id
    if comment_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment ID is required")
    if not author_email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Author email is required")
    if not delete_comment(session, comment_id, author_email, is_admin=is_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found or unauthorized")
    return {"success": True}
