"""SQLAlchemy engine/session primitives, connection retry and health checks."""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
import time
from typing import Generator, Iterator, Optional, Tuple

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from reviewhub.core.config import get_settings
from reviewhub.core.logger import get_logger
from reviewhub.core.metrics import record_db_connect_retry
from reviewhub.storage.errors import DatabaseUnavailableError


Base = declarative_base()
logger = get_logger("reviewhub.storage")

_RETRYABLE_ERRORS = (OperationalError, PoolTimeoutError)


def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
    del connection_record
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(engine: Engine) -> Engine:
    """Turn on FK enforcement for every SQLite connection; cascades depend on it."""

    if engine.dialect.name == "sqlite" and not event.contains(engine, "connect", _set_sqlite_pragma):
        event.listen(engine, "connect", _set_sqlite_pragma)
    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    settings = get_settings()
    kwargs: dict[str, object] = {"pool_pre_ping": True, "future": True}

    if settings.database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=0,
            pool_timeout=settings.db_pool_timeout_seconds,
            pool_recycle=settings.db_pool_recycle_seconds,
            connect_args={
                "connect_timeout": settings.db_pool_timeout_seconds,
                "options": f"-c statement_timeout={settings.db_statement_timeout_ms}",
            },
        )

    return enable_sqlite_foreign_keys(create_engine(settings.database_url, **kwargs))


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False)


def get_session() -> Generator[Session, None, None]:
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Transactional scope for callers outside a request."""

    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def acquire_connection(
    session: Session,
    *,
    attempts: int | None = None,
    backoff_seconds: float | None = None,
) -> Connection:
    """Check out the session's connection, retrying transient acquisition failures.

    Every store calls this before its first statement so the retry policy is
    applied uniformly. Exhausting the attempts raises DatabaseUnavailableError.
    """

    settings = get_settings()
    max_attempts = max(1, attempts if attempts is not None else settings.db_connect_retry_attempts)
    backoff = settings.db_connect_retry_backoff_seconds if backoff_seconds is None else backoff_seconds

    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            connection = session.connection()
            if attempt > 1:
                record_db_connect_retry(outcome="recovered")
            return connection
        except _RETRYABLE_ERRORS as exc:
            last_error = exc
            session.rollback()
            logger.warning(
                "db_connect_attempt_failed",
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(exc),
            )
            if attempt < max_attempts:
                time.sleep(backoff)

    record_db_connect_retry(outcome="exhausted")
    raise DatabaseUnavailableError(f"Failed to connect to database after retries: {last_error}") from last_error


def disable_statement_timeout(session: Session) -> None:
    """Lift the statement timeout for the current transaction only."""

    connection = acquire_connection(session)
    if connection.dialect.name == "postgresql":
        session.execute(text("SET LOCAL statement_timeout = 0"))


def test_connection() -> Tuple[bool, Optional[str]]:
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
        return True, None
    except Exception as exc:  # pragma: no cover
        return False, str(exc)


def load_models() -> None:
    """Import ORM models so Base metadata contains all mapped tables."""

    # Import side effect is intentional here.
    import reviewhub.storage.models  # noqa: F401
