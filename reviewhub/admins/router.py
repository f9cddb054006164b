"""Admin registration, login, dashboard and audit routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from reviewhub.admins.service import (
    ACCOUNT_STATUS_ACTIVE,
    ACCOUNT_STATUS_PENDING,
    ACCOUNT_STATUS_SUSPENDED,
    authenticate_admin,
    get_admin_by_email,
    list_admin_actions,
    register_admin,
)
from reviewhub.core.logger import get_logger
from reviewhub.schemas.admin import (
    AdminActionResponse,
    AdminAuthResponse,
    AdminLoginRequest,
    AdminProfile,
    AdminRegisterRequest,
)
from reviewhub.schemas.submission import AdminStatsResponse
from reviewhub.schemas.user import UserResponse
from reviewhub.storage.db import get_session
from reviewhub.storage.security import verify_password
from reviewhub.submissions.service import get_admin_stats
from reviewhub.users.service import list_users


router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = get_logger("reviewhub.api.admin")


@router.post("/register", response_model=AdminAuthResponse, status_code=201)
def register(payload: AdminRegisterRequest, session: Session = Depends(get_session)) -> AdminAuthResponse:
    admin = register_admin(
        session,
        email=payload.email,
        name=payload.name,
        password=payload.password,
        admin_role=payload.admin_role,
        country=payload.country,
        account_status=payload.account_status or ACCOUNT_STATUS_ACTIVE,
    )
    return AdminAuthResponse(
        message="Admin registered successfully",
        admin=AdminProfile.model_validate(admin),
    )


@router.post("/login", response_model=AdminAuthResponse)
def login(payload: AdminLoginRequest, session: Session = Depends(get_session)) -> AdminAuthResponse:
    admin = authenticate_admin(session, payload.email, payload.password)
    if admin is not None:
        logger.info("admin_login_succeeded", admin_id=admin.id)
        return AdminAuthResponse(admin=AdminProfile.model_validate(admin))

    existing = get_admin_by_email(session, payload.email)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")

    logger.warning("admin_login_refused", admin_id=existing.id, account_status=existing.account_status)
    if not verify_password(payload.password, existing.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    if existing.account_status == ACCOUNT_STATUS_PENDING:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is pending approval")
    if existing.account_status == ACCOUNT_STATUS_SUSPENDED:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is suspended")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")


@router.get("/stats", response_model=AdminStatsResponse)
def stats(session: Session = Depends(get_session)) -> AdminStatsResponse:
    return AdminStatsResponse.model_validate(get_admin_stats(session))


@router.get("/users", response_model=list[UserResponse])
def users(session: Session = Depends(get_session)) -> list[UserResponse]:
    return [UserResponse.model_validate(user) for user in list_users(session)]


@router.get("/actions", response_model=list[AdminActionResponse])
def actions(
    admin_id: Optional[int] = Query(default=None, alias="adminId"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    session: Session = Depends(get_session),
) -> list[AdminActionResponse]:
    return [
        AdminActionResponse.model_validate(action)
        for action in list_admin_actions(session, admin_id=admin_id, limit=limit)
    ]
