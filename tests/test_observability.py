from types import SimpleNamespace

from reviewhub.core import observability


def _settings(dsn: str, rate: float = 0.0) -> SimpleNamespace:
    return SimpleNamespace(
        sentry_dsn=dsn,
        env="production",
        app_name="reviewhub",
        app_version="0.1.0",
        sentry_traces_sample_rate=rate,
    )


def test_init_sentry_skips_when_dsn_missing(monkeypatch) -> None:
    observability.reset_observability_for_tests()

    called = {"count": 0}

    def fake_init(**kwargs):  # noqa: ARG001
        called["count"] += 1

    monkeypatch.setattr(observability, "_call_sentry_init", fake_init)
    monkeypatch.setattr(observability, "get_settings", lambda: _settings(""))

    assert observability.init_sentry() is False
    assert called["count"] == 0
    observability.reset_observability_for_tests()


def test_init_sentry_initializes_once(monkeypatch) -> None:
    observability.reset_observability_for_tests()

    calls = []

    def fake_init(**kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(observability, "FastApiIntegration", lambda: object())
    monkeypatch.setattr(observability, "_call_sentry_init", fake_init)
    monkeypatch.setattr(
        observability,
        "get_settings",
        lambda: _settings("https://abc@example.ingest.sentry.io/1", rate=0.2),
    )

    assert observability.init_sentry() is True
    assert observability.init_sentry() is True
    assert len(calls) == 1
    assert calls[0]["dsn"] == "https://abc@example.ingest.sentry.io/1"
    assert calls[0]["environment"] == "production"
    assert calls[0]["release"] == "reviewhub@0.1.0"
    assert calls[0]["traces_sample_rate"] == 0.2
    observability.reset_observability_for_tests()


def test_scope_and_capture_are_noops_without_sentry(monkeypatch) -> None:
    observability.reset_observability_for_tests()
    captured = []
    monkeypatch.setattr(observability.sentry_sdk, "capture_exception", captured.append)

    with observability.sentry_scope(request_id="req-1", user_email="user@example.com"):
        observability.capture_exception(RuntimeError("boom"))

    assert captured == []


def test_log_events_carry_service_and_request_context() -> None:
    import structlog

    from reviewhub.core import logger as logger_module

    add_context = logger_module._service_context_processor(
        {"service": "reviewhub", "service_version": "0.1.0", "env": "test"}
    )
    event = add_context(None, "info", {"event": "submission_created", "env": "override"})
    assert event["service"] == "reviewhub"
    assert event["env"] == "override"
    assert event["user_email"] is None

    logger_module.bind_request_context("req-1", method="GET", user_email="owner@example.com")
    try:
        bound = structlog.contextvars.get_contextvars()
        assert bound == {"request_id": "req-1", "http_method": "GET", "user_email": "owner@example.com"}
    finally:
        logger_module.clear_request_context()
    assert structlog.contextvars.get_contextvars() == {}
