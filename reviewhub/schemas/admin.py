"""Pydantic schemas for admin registration, login and audit APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


AdminRole = Literal["super_admin", "validator_admin"]
AccountStatus = Literal["active", "pending", "suspended"]


class AdminRegisterRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=255)
    admin_role: AdminRole
    country: Optional[str] = Field(default=None, max_length=100)
    account_status: Optional[AccountStatus] = None


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=255)


class AdminProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    admin_role: str
    country: Optional[str] = None
    account_status: str


class AdminAuthResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    admin: AdminProfile


class AdminActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    admin_id: int
    action_type: str
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    description: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
