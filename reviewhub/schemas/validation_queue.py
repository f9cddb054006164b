"""Pydantic schemas for the validation queue API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ValidationQueueAddRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    admin_email: EmailStr
    submission_id: Optional[str] = Field(default=None, min_length=1, max_length=255)
    submission_ids: Optional[list[str]] = None


class ValidationQueueRemoveRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    submission_ids: Optional[list[str]] = None


class ValidationQueueItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    submission_id: str
    admin_email: str
    status: str
    created_at: datetime
    updated_at: datetime


class ValidationQueueAddResponse(BaseModel):
    success: bool = True
    item: Optional[ValidationQueueItemResponse] = None
    items: Optional[list[ValidationQueueItemResponse]] = None
    count: Optional[int] = None


class ValidationQueueRemoveResponse(BaseModel):
    success: bool
    count: Optional[int] = None
