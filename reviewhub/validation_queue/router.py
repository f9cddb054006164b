"""Validation queue API routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from reviewhub.schemas.validation_queue import (
    ValidationQueueAddRequest,
    ValidationQueueAddResponse,
    ValidationQueueItemResponse,
    ValidationQueueRemoveRequest,
    ValidationQueueRemoveResponse,
)
from reviewhub.storage.db import get_session
from reviewhub.validation_queue.service import (
    UnknownSubmissionError,
    dequeue,
    dequeue_bulk,
    enqueue,
    enqueue_bulk,
    list_queue,
)


router = APIRouter(prefix="/api/validation-queue", tags=["validation-queue"])


def _require_admin_email(admin_email: Optional[str]) -> str:
    if not admin_email or not admin_email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="adminEmail is required")
    return admin_email.strip()


@router.get("", response_model=list[ValidationQueueItemResponse])
def read_queue(
    admin_email: Optional[str] = Query(default=None, alias="adminEmail"),
    session: Session = Depends(get_session),
) -> list[ValidationQueueItemResponse]:
    reviewer = _require_admin_email(admin_email)
    return [ValidationQueueItemResponse.model_validate(item) for item in list_queue(session, reviewer)]


@router.post("", response_model=ValidationQueueAddResponse, response_model_exclude_none=True)
def add_to_queue(
    payload: ValidationQueueAddRequest,
    session: Session = Depends(get_session),
) -> ValidationQueueAddResponse:
    try:
        if payload.submission_ids is not None:
            items = enqueue_bulk(session, payload.submission_ids, payload.admin_email)
            return ValidationQueueAddResponse(
                items=[ValidationQueueItemResponse.model_validate(item) for item in items],
                count=len(items),
            )
        if payload.submission_id:
            item = enqueue(session, payload.submission_id, payload.admin_email)
            return ValidationQueueAddResponse(item=ValidationQueueItemResponse.model_validate(item))
    except UnknownSubmissionError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="submissionId or submissionIds is required",
    )


@router.delete("", response_model=ValidationQueueRemoveResponse, response_model_exclude_none=True)
def remove_from_queue(
    admin_email: Optional[str] = Query(default=None, alias="adminEmail"),
    submission_id: Optional[str] = Query(default=None, alias="submissionId"),
    payload: Optional[ValidationQueueRemoveRequest] = None,
    session: Session = Depends(get_session),
) -> ValidationQueueRemoveResponse:
    reviewer = _require_admin_email(admin_email)
    if payload is not None and payload.submission_ids is not None:
        count = dequeue_bulk(session, payload.submission_ids, reviewer)
        return ValidationQueueRemoveResponse(success=True, count=count)
    if submission_id:
        return ValidationQueueRemoveResponse(success=dequeue(session, submission_id, reviewer))

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="submissionId or submissionIds is required",
    )
