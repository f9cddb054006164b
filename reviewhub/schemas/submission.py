"""Pydantic schemas for the submissions API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


FileType = Literal["image", "audio", "video", "document"]
SubmissionStatus = Literal["pending", "processing", "submitted", "validated", "successful", "rejected", "failed"]


class _ClientPayload(BaseModel):
    """Request bodies accept camelCase (browser clients) and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmissionCreateRequest(_ClientPayload):
    id: str = Field(min_length=1, max_length=255)
    user_email: EmailStr
    file_name: str = Field(min_length=1, max_length=500)
    file_type: FileType
    file_size: int = Field(ge=0)
    status: Optional[SubmissionStatus] = None
    preview: Optional[str] = None
    width: Optional[int] = Field(default=None, ge=0)
    height: Optional[int] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, ge=0)


class SubmitForValidationRequest(_ClientPayload):
    """Optional body for /submit; used to create the row when it is missing."""

    user_email: Optional[EmailStr] = None
    file_name: Optional[str] = Field(default=None, max_length=500)
    file_type: Optional[FileType] = None
    file_size: Optional[int] = Field(default=None, ge=0)
    preview: Optional[str] = None


class ReviewDecisionRequest(_ClientPayload):
    admin_email: Optional[EmailStr] = None
    rejection_reason: Optional[str] = Field(default=None, max_length=2000)
    rejection_feedback: Optional[str] = Field(default=None, max_length=10000)


class SubmissionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_email: str
    file_name: str
    file_type: str
    file_size: int
    status: str
    rejection_reason: Optional[str] = None
    rejection_feedback: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SubmissionResponse(SubmissionSummary):
    preview: Optional[str] = None


class SubmissionDetailResponse(SubmissionResponse):
    type_data: Optional[dict] = None


class SubmissionActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    submission: SubmissionResponse


class SubmissionDeleteResponse(BaseModel):
    success: bool


class SubmissionPreviewResponse(BaseModel):
    preview: Optional[str] = None
    mime_type: Optional[str] = None


class UserSubmissionStats(BaseModel):
    total: int
    images: int
    videos: int
    audios: int
    documents: int


class RecentSubmission(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    file_type: str
    file_size: int
    user_email: str
    status: str
    created_at: datetime


class FileTypeCount(BaseModel):
    type: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class AdminStatsResponse(BaseModel):
    total_submissions: int
    pending_submissions: int
    validated_submissions: int
    rejected_submissions: int
    total_volunteers: int
    today_submissions: int
    validation_queue: int
    recent_submissions: list[RecentSubmission]
    file_type_stats: list[FileTypeCount]
    weekly_trend: list[DailyCount]
