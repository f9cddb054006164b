"""Contributor (user) records keyed by email."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from reviewhub.storage.db import acquire_connection
from reviewhub.storage.models import User, utcnow
from reviewhub.storage.security import hash_password
from reviewhub.storage.upsert import dialect_insert


def ensure_user(session: Session, email: str) -> None:
    """Insert a bare user row for ``email`` unless one exists; the caller commits."""

    now = utcnow()
    stmt = (
        dialect_insert(session, User)
        .values(email=email, created_at=now, updated_at=now)
        .on_conflict_do_nothing(index_elements=["email"])
    )
    session.execute(stmt)


def create_user(
    session: Session,
    *,
    email: str,
    name: str | None = None,
    password: str | None = None,
) -> User:
    """Create a user, or update the name of an existing one."""

    acquire_connection(session)
    now = utcnow()
    stmt = dialect_insert(session, User).values(
        email=email,
        name=name,
        password_hash=hash_password(password) if password else None,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["email"],
        set_={"name": stmt.excluded.name, "updated_at": now},
    )
    session.execute(stmt)
    session.commit()
    user = session.scalar(select(User).where(User.email == email).execution_options(populate_existing=True))
    if user is None:  # pragma: no cover
        raise RuntimeError("User upsert did not persist")
    return user


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    acquire_connection(session)
    return session.scalar(select(User).where(User.email == email))


def get_user_by_id(session: Session, user_id: int) -> Optional[User]:
    acquire_connection(session)
    return session.scalar(select(User).where(User.id == user_id))


def list_users(session: Session) -> list[User]:
    acquire_connection(session)
    return list(session.scalars(select(User).order_by(User.created_at.desc(), User.id.desc())).all())
