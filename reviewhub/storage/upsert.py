"""Dialect-specific INSERT ... ON CONFLICT builders."""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def dialect_insert(session: Session, model: Any):
    """Return an insert() that supports on_conflict_do_nothing/do_update."""

    dialect_name = session.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(model)
    if dialect_name == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upsert is not supported for dialect '{dialect_name}'")
