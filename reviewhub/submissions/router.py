"""Submission API routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reviewhub.api.request_meta import resolve_client_ip, resolve_user_agent
from reviewhub.core.logger import get_logger
from reviewhub.media.preview import format_preview
from reviewhub.media.stores import entity_payload, store_for_file_type
from reviewhub.schemas.submission import (
    FileType,
    ReviewDecisionRequest,
    SubmissionActionResponse,
    SubmissionCreateRequest,
    SubmissionDeleteResponse,
    SubmissionDetailResponse,
    SubmissionPreviewResponse,
    SubmissionResponse,
    SubmissionSummary,
    SubmitForValidationRequest,
    UserSubmissionStats,
)
from reviewhub.storage.db import get_session
from reviewhub.storage.errors import DuplicateRecordError
from reviewhub.submissions.lifecycle import STATUS_REJECTED, STATUS_SUBMITTED, STATUS_VALIDATED
from reviewhub.submissions.review import ReviewRequestMeta, apply_review_decision
from reviewhub.submissions.service import (
    create_submission,
    delete_submission,
    get_pending_submissions,
    get_rejected_submissions,
    get_submission,
    get_submission_with_details,
    get_submissions_by_type,
    get_user_submission_stats,
    get_user_submissions,
    get_validated_submissions,
    update_submission_status,
)


router = APIRouter(prefix="/api/submissions", tags=["submissions"])
logger = get_logger("reviewhub.api.submissions")


def _require_user_email(user_email: Optional[str]) -> str:
    if not user_email or not user_email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userEmail is required")
    return user_email.strip()


def _review_meta(request: Request, payload: Optional[ReviewDecisionRequest]) -> ReviewRequestMeta:
    return ReviewRequestMeta(
        admin_email=payload.admin_email if payload is not None else None,
        ip_address=resolve_client_ip(request),
        user_agent=resolve_user_agent(request),
    )


@router.post("", response_model=SubmissionResponse, status_code=201)
def create(payload: SubmissionCreateRequest, session: Session = Depends(get_session)) -> SubmissionResponse:
    submission = create_submission(
        session,
        submission_id=payload.id,
        user_email=payload.user_email,
        file_name=payload.file_name,
        file_type=payload.file_type,
        file_size=payload.file_size,
        status=payload.status,
        preview=payload.preview,
        width=payload.width,
        height=payload.height,
        duration=payload.duration,
    )
    return SubmissionResponse.model_validate(submission)


@router.get("", response_model=list[SubmissionSummary])
def list_for_user(
    user_email: Optional[str] = Query(default=None, alias="userEmail"),
    file_type: Optional[FileType] = Query(default=None, alias="fileType"),
    session: Session = Depends(get_session),
) -> list[SubmissionSummary]:
    owner = _require_user_email(user_email)
    if file_type is not None:
        rows = get_submissions_by_type(session, owner, file_type)
    else:
        rows = get_user_submissions(session, owner)
    return [SubmissionSummary.model_validate(row) for row in rows]


@router.get("/stats", response_model=UserSubmissionStats)
def stats_for_user(
    user_email: Optional[str] = Query(default=None, alias="userEmail"),
    session: Session = Depends(get_session),
) -> UserSubmissionStats:
    owner = _require_user_email(user_email)
    return UserSubmissionStats(**get_user_submission_stats(session, owner))


@router.get("/pending", response_model=list[SubmissionSummary])
def list_pending(session: Session = Depends(get_session)) -> list[SubmissionSummary]:
    return [SubmissionSummary.model_validate(row) for row in get_pending_submissions(session)]


@router.get("/validated", response_model=list[SubmissionSummary])
def list_validated(session: Session = Depends(get_session)) -> list[SubmissionSummary]:
    return [SubmissionSummary.model_validate(row) for row in get_validated_submissions(session)]


@router.get("/rejected", response_model=list[SubmissionSummary])
def list_rejected(session: Session = Depends(get_session)) -> list[SubmissionSummary]:
    return [SubmissionSummary.model_validate(row) for row in get_rejected_submissions(session)]


@router.get("/{submission_id}", response_model=SubmissionDetailResponse)
def read(submission_id: str, session: Session = Depends(get_session)) -> SubmissionDetailResponse:
    details = get_submission_with_details(session, submission_id)
    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    submission, entity = details
    response = SubmissionDetailResponse.model_validate(submission)
    response.type_data = entity_payload(entity) if entity is not None else None
    return response


@router.delete("/{submission_id}", response_model=SubmissionDeleteResponse)
def remove(
    submission_id: str,
    user_email: Optional[str] = Query(default=None, alias="userEmail"),
    session: Session = Depends(get_session),
) -> SubmissionDeleteResponse:
    owner = _require_user_email(user_email)
    if not delete_submission(session, submission_id, owner):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found or unauthorized")
    return SubmissionDeleteResponse(success=True)


@router.post("/{submission_id}/submit", response_model=SubmissionActionResponse)
def submit_for_validation(
    submission_id: str,
    payload: Optional[SubmitForValidationRequest] = None,
    session: Session = Depends(get_session),
) -> SubmissionActionResponse:
    existing = get_submission(session, submission_id)
    if existing is None and payload is not None and payload.user_email and payload.file_name and payload.file_type:
        try:
            existing = create_submission(
                session,
                submission_id=submission_id,
                user_email=payload.user_email,
                file_name=payload.file_name,
                file_type=payload.file_type,
                file_size=payload.file_size or 0,
                status=STATUS_SUBMITTED,
                preview=payload.preview,
            )
        except (DuplicateRecordError, SQLAlchemyError) as exc:
            logger.warning("submit_create_failed", submission_id=submission_id, error=str(exc))
            existing = get_submission(session, submission_id)

    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")

    submission = update_submission_status(session, submission_id, STATUS_SUBMITTED)
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    return SubmissionActionResponse(
        message="Successfully submitted for validation",
        submission=SubmissionResponse.model_validate(submission),
    )


@router.post("/{submission_id}/validate", response_model=SubmissionActionResponse)
def validate(
    submission_id: str,
    request: Request,
    payload: Optional[ReviewDecisionRequest] = None,
    session: Session = Depends(get_session),
) -> SubmissionActionResponse:
    submission = apply_review_decision(session, submission_id, STATUS_VALIDATED, _review_meta(request, payload))
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    return SubmissionActionResponse(submission=SubmissionResponse.model_validate(submission))


@router.post("/{submission_id}/reject", response_model=SubmissionActionResponse)
def reject(
    submission_id: str,
    request: Request,
    payload: Optional[ReviewDecisionRequest] = None,
    session: Session = Depends(get_session),
) -> SubmissionActionResponse:
    submission = apply_review_decision(
        session,
        submission_id,
        STATUS_REJECTED,
        _review_meta(request, payload),
        rejection_reason=payload.rejection_reason if payload is not None else None,
        rejection_feedback=payload.rejection_feedback if payload is not None else None,
    )
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    return SubmissionActionResponse(submission=SubmissionResponse.model_validate(submission))


@router.get("/{submission_id}/preview", response_model=SubmissionPreviewResponse)
def preview(submission_id: str, session: Session = Depends(get_session)) -> SubmissionPreviewResponse:
    submission = get_submission(session, submission_id)
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")

    store = store_for_file_type(submission.file_type)
    entity = store.get_by_submission_id(session, submission_id) if store is not None else None
    if entity is not None and entity.preview_data:
        data, mime_type = format_preview(entity.preview_data, entity.mime_type, submission.file_type)
        return SubmissionPreviewResponse(preview=data, mime_type=mime_type or entity.mime_type)

    data, mime_type = format_preview(submission.preview, None, submission.file_type)
    return SubmissionPreviewResponse(preview=data, mime_type=mime_type)
