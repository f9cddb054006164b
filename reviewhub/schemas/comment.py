"""Pydantic schemas for submission comments."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class _CommentText(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    comment_text: str = Field(min_length=1, max_length=10000)

    @field_validator("comment_text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Comment text is required")
        return stripped


class CommentCreateRequest(_CommentText):
    author_email: EmailStr
    author_type: Literal["user", "admin"]
    parent_comment_id: Optional[int] = None


class CommentUpdateRequest(_CommentText):
    comment_id: int
    author_email: EmailStr


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    submission_id: str
    author_email: str
    author_type: str
    comment_text: str
    parent_comment_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
