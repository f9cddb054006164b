"""Idempotent schema bootstrap run once at process start."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reviewhub.core.logger import get_logger
from reviewhub.storage.db import Base, get_engine, load_models


logger = get_logger("reviewhub.bootstrap")

UPDATED_AT_TABLES = (
    "users",
    "admins",
    "submissions",
    "images",
    "videos",
    "audio_files",
    "web_data",
    "validation_queue",
    "notifications",
    "submission_comments",
)

_UPDATED_AT_FUNCTION = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    IF NEW.updated_at IS NULL OR NEW.updated_at <= OLD.updated_at THEN
        NEW.updated_at = GREATEST(CURRENT_TIMESTAMP, OLD.updated_at + INTERVAL '1 microsecond');
    END IF;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""


def _install_updated_at_triggers(engine: Engine) -> None:
    with engine.begin() as connection:
        connection.execute(text(_UPDATED_AT_FUNCTION))
        for table_name in UPDATED_AT_TABLES:
            connection.execute(text(f"DROP TRIGGER IF EXISTS update_{table_name}_updated_at ON {table_name}"))
            connection.execute(
                text(
                    f"CREATE TRIGGER update_{table_name}_updated_at "
                    f"BEFORE UPDATE ON {table_name} "
                    "FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
                )
            )


def bootstrap_schema(engine: Engine | None = None) -> list[str]:
    """Create missing tables/indexes and, on PostgreSQL, updated_at triggers.

    Safe to call repeatedly. Returns the table names known to the metadata.
    """

    target = engine if engine is not None else get_engine()
    load_models()
    Base.metadata.create_all(target, checkfirst=True)
    if target.dialect.name == "postgresql":
        _install_updated_at_triggers(target)

    tables = sorted(Base.metadata.tables)
    logger.info("schema_bootstrapped", dialect=target.dialect.name, tables=tables)
    return tables
