"""Notification inbox API routes."""

from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from reviewhub.notifications.service import (
    count_unread,
    create_notification,
    delete_all_notifications,
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
)
from reviewhub.schemas.notification import (
    NotificationBulkResponse,
    NotificationCountResponse,
    NotificationCreateRequest,
    NotificationMarkReadRequest,
    NotificationResponse,
)
from reviewhub.storage.db import get_session


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _require_user_email(user_email: Optional[str]) -> str:
    if not user_email or not user_email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userEmail is required")
    return user_email.strip()


@router.get("", response_model=Union[NotificationCountResponse, list[NotificationResponse]])
def read_notifications(
    user_email: Optional[str] = Query(default=None, alias="userEmail"),
    count_only: bool = Query(default=False, alias="countOnly"),
    session: Session = Depends(get_session),
):
    owner = _require_user_email(user_email)
    if count_only:
        return NotificationCountResponse(count=count_unread(session, owner))
    return [NotificationResponse.model_validate(item) for item in list_notifications(session, owner)]


@router.post("", response_model=NotificationResponse, status_code=201)
def create(payload: NotificationCreateRequest, session: Session = Depends(get_session)) -> NotificationResponse:
    notification = create_notification(
        session,
        user_email=payload.user_email,
        type=payload.type,
        title=payload.title,
        message=payload.message,
        action_url=payload.action_url,
    )
    return NotificationResponse.model_validate(notification)


@router.patch("", response_model=NotificationBulkResponse, response_model_exclude_none=True)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    session: Session = Depends(get_session),
) -> NotificationBulkResponse:
    if payload.mark_all:
        count = mark_all_read(session, payload.user_email)
        return NotificationBulkResponse(message=f"Marked {count} notifications as read")

    if not payload.notification_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="notificationId is required when markAll is false",
        )
    notification = mark_read(session, payload.notification_id, payload.user_email)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found or access denied")
    return NotificationBulkResponse(notification=NotificationResponse.model_validate(notification))


@router.delete("", response_model=NotificationBulkResponse, response_model_exclude_none=True)
def remove_notifications(
    user_email: Optional[str] = Query(default=None, alias="userEmail"),
    notification_id: Optional[str] = Query(default=None, alias="notificationId"),
    delete_all: bool = Query(default=False, alias="deleteAll"),
    session: Session = Depends(get_session),
) -> NotificationBulkResponse:
    owner = _require_user_email(user_email)
    if delete_all:
        count = delete_all_notifications(session, owner)
        return NotificationBulkResponse(message=f"Deleted {count} notifications")

    if not notification_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="notificationId is required when deleteAll is false",
        )
    if not delete_notification(session, notification_id, owner):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found or access denied")
    return NotificationBulkResponse()
