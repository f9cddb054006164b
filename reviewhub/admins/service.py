"""Reviewer (admin) accounts, authentication and the admin audit log."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from reviewhub.core.config import get_settings
from reviewhub.core.logger import get_logger
from reviewhub.storage.db import acquire_connection
from reviewhub.storage.errors import DuplicateRecordError
from reviewhub.storage.models import Admin, AdminAction, utcnow
from reviewhub.storage.security import hash_password, verify_password
from reviewhub.storage.upsert import dialect_insert


logger = get_logger("reviewhub.admins")

ADMIN_ROLES = ("super_admin", "validator_admin")
ACCOUNT_STATUS_ACTIVE = "active"
ACCOUNT_STATUS_PENDING = "pending"
ACCOUNT_STATUS_SUSPENDED = "suspended"
ACCOUNT_STATUSES = (ACCOUNT_STATUS_ACTIVE, ACCOUNT_STATUS_PENDING, ACCOUNT_STATUS_SUSPENDED)

_UPDATABLE_FIELDS = ("name", "admin_role", "country", "account_status")


def _check_role(admin_role: str) -> None:
    if admin_role not in ADMIN_ROLES:
        raise ValueError(f"Unknown admin role: {admin_role}")


def _check_status(account_status: str) -> None:
    if account_status not in ACCOUNT_STATUSES:
        raise ValueError(f"Unknown account status: {account_status}")


def _reload(session: Session, admin_id: int) -> Optional[Admin]:
    return session.scalar(select(Admin).where(Admin.id == admin_id).execution_options(populate_existing=True))


def create_admin(
    session: Session,
    *,
    email: str,
    name: str,
    password: str,
    admin_role: str,
    country: str | None = None,
    account_status: str = ACCOUNT_STATUS_PENDING,
) -> Admin:
    """Insert an admin, or refresh name/role/country of the existing one.

    The stored password and account status of an existing admin are kept.
    """

    _check_role(admin_role)
    _check_status(account_status)
    acquire_connection(session)
    now = utcnow()
    stmt = dialect_insert(session, Admin).values(
        email=email,
        name=name,
        password_hash=hash_password(password),
        admin_role=admin_role,
        country=country,
        account_status=account_status,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["email"],
        set_={
            "name": stmt.excluded.name,
            "admin_role": stmt.excluded.admin_role,
            "country": stmt.excluded.country,
            "updated_at": now,
        },
    )
    session.execute(stmt)
    session.commit()
    admin = session.scalar(select(Admin).where(Admin.email == email).execution_options(populate_existing=True))
    if admin is None:  # pragma: no cover
        raise RuntimeError("Admin upsert did not persist")
    return admin


def register_admin(
    session: Session,
    *,
    email: str,
    name: str,
    password: str,
    admin_role: str,
    country: str | None = None,
    account_status: str = ACCOUNT_STATUS_ACTIVE,
) -> Admin:
    """Self-service registration; refuses an email that is already registered."""

    if get_admin_by_email(session, email) is not None:
        raise DuplicateRecordError("Admin with this email already exists")
    admin = create_admin(
        session,
        email=email,
        name=name,
        password=password,
        admin_role=admin_role,
        country=country,
        account_status=account_status,
    )
    logger.info("admin_registered", admin_id=admin.id, admin_role=admin.admin_role)
    return admin


def get_admin_by_email(session: Session, email: str) -> Optional[Admin]:
    acquire_connection(session)
    return session.scalar(select(Admin).where(Admin.email == email).execution_options(populate_existing=True))


def get_admin_by_id(session: Session, admin_id: int) -> Optional[Admin]:
    acquire_connection(session)
    return _reload(session, admin_id)


def list_admins(session: Session) -> list[Admin]:
    acquire_connection(session)
    return list(session.scalars(select(Admin).order_by(Admin.created_at.desc(), Admin.id.desc())).all())


def update_admin(session: Session, admin_id: int, **changes: Any) -> Optional[Admin]:
    """Apply the given subset of name/admin_role/country/account_status."""

    values = {key: value for key, value in changes.items() if key in _UPDATABLE_FIELDS and value is not None}
    if "admin_role" in values:
        _check_role(values["admin_role"])
    if "account_status" in values:
        _check_status(values["account_status"])

    acquire_connection(session)
    if not values:
        return _reload(session, admin_id)

    values["updated_at"] = utcnow()
    result = session.execute(
        update(Admin).where(Admin.id == admin_id).values(**values)
    )
    session.commit()
    if not result.rowcount:
        return None
    return _reload(session, admin_id)


def deactivate_admin(session: Session, admin_id: int) -> bool:
    """Soft delete: the account is suspended, never removed."""

    acquire_connection(session)
    result = session.execute(
        update(Admin)
        .where(Admin.id == admin_id)
        .values(account_status=ACCOUNT_STATUS_SUSPENDED, updated_at=utcnow())
    )
    session.commit()
    if result.rowcount:
        logger.info("admin_suspended", admin_id=admin_id)
    return bool(result.rowcount)


def authenticate_admin(session: Session, email: str, password: str) -> Optional[Admin]:
    """Return the admin when the password matches and the account is active."""

    admin = get_admin_by_email(session, email)
    if admin is None:
        return None
    if not verify_password(password, admin.password_hash):
        return None
    if admin.account_status != ACCOUNT_STATUS_ACTIVE:
        return None
    return admin


def log_admin_action(
    session: Session,
    *,
    admin_id: int,
    action_type: str,
    target_type: str | None = None,
    target_id: str | None = None,
    description: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> AdminAction:
    acquire_connection(session)
    action = AdminAction(
        admin_id=admin_id,
        action_type=action_type,
        target_type=target_type,
        target_id=target_id,
        description=description,
        ip_address=ip_address[:45] if ip_address else None,
        user_agent=user_agent,
        created_at=utcnow(),
    )
    session.add(action)
    session.commit()
    return action


def list_admin_actions(session: Session, *, admin_id: int | None = None, limit: int | None = None) -> list[AdminAction]:
    acquire_connection(session)
    stmt = select(AdminAction)
    if admin_id is not None:
        stmt = stmt.where(AdminAction.admin_id == admin_id)
    stmt = stmt.order_by(AdminAction.created_at.desc(), AdminAction.id.desc()).limit(
        limit if limit is not None and limit > 0 else get_settings().admin_action_list_limit
    )
    return list(session.scalars(stmt).all())
