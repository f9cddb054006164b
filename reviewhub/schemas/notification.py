"""Pydantic schemas for the notifications API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


NotificationType = Literal["success", "error", "info", "warning"]


class NotificationCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_email: EmailStr
    type: NotificationType
    title: str = Field(min_length=1, max_length=500)
    message: str = Field(min_length=1)
    action_url: Optional[str] = Field(default=None, max_length=500)


class NotificationMarkReadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_email: EmailStr = Field(alias="userEmail")
    notification_id: Optional[str] = Field(default=None, alias="notificationId")
    mark_all: bool = Field(default=False, alias="markAll")


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_email: str
    type: str
    title: str
    message: str
    read: bool
    action_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class NotificationCountResponse(BaseModel):
    count: int


class NotificationBulkResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    notification: Optional[NotificationResponse] = None
