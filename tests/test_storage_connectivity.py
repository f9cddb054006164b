import pytest
from sqlalchemy.exc import OperationalError

import reviewhub.storage.db as db_module
from reviewhub.storage.errors import DatabaseUnavailableError, is_undefined_table


class _DummyConnection:
    def execute(self, _statement):
        return 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        del exc_type, exc, tb
        return False


class _DummyEngine:
    def connect(self):
        return _DummyConnection()


class _FlakySession:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0
        self.rollbacks = 0

    def connection(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        return "connection"

    def rollback(self):
        self.rollbacks += 1


def test_db_connection_success(monkeypatch) -> None:
    monkeypatch.setattr(db_module, "get_engine", lambda: _DummyEngine())
    ok, error = db_module.test_connection()
    assert ok is True
    assert error is None


def test_acquire_connection_retries_transient_failures(monkeypatch) -> None:
    sleeps = []
    monkeypatch.setattr(db_module.time, "sleep", sleeps.append)
    session = _FlakySession(failures=2)

    connection = db_module.acquire_connection(session, attempts=3, backoff_seconds=0.5)

    assert connection == "connection"
    assert session.calls == 3
    assert session.rollbacks == 2
    assert sleeps == [0.5, 0.5]


def test_acquire_connection_raises_after_exhausting_attempts(monkeypatch) -> None:
    monkeypatch.setattr(db_module.time, "sleep", lambda _seconds: None)
    session = _FlakySession(failures=5)

    with pytest.raises(DatabaseUnavailableError, match="Failed to connect to database after retries"):
        db_module.acquire_connection(session, attempts=3, backoff_seconds=0)

    assert session.calls == 3


class _RecordingSession:
    def __init__(self) -> None:
        self.events: list[str] = []

    def commit(self):
        self.events.append("commit")

    def rollback(self):
        self.events.append("rollback")

    def close(self):
        self.events.append("close")


def test_session_scope_commits_or_rolls_back(monkeypatch) -> None:
    sessions = []

    def factory():
        session = _RecordingSession()
        sessions.append(session)
        return session

    monkeypatch.setattr(db_module, "get_session_factory", lambda: factory)

    with db_module.session_scope():
        pass
    assert sessions[0].events == ["commit", "close"]

    with pytest.raises(RuntimeError):
        with db_module.session_scope():
            raise RuntimeError("boom")
    assert sessions[1].events == ["rollback", "close"]


def test_undefined_table_detection() -> None:
    class _PgError(Exception):
        pgcode = "42P01"

    assert is_undefined_table(OperationalError("SELECT", {}, _PgError("relation missing")))
    assert is_undefined_table(OperationalError("SELECT", {}, Exception("no such table: notifications")))
    assert not is_undefined_table(OperationalError("SELECT", {}, Exception("disk I/O error")))
    assert not is_undefined_table(ValueError("no such table"))
