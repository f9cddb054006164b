"""JSON logging for reviewhub services and scripts."""

from __future__ import annotations

import logging
from typing import Any

import structlog

from reviewhub.core.config import get_settings


_CONFIGURED = False


def build_service_context() -> dict[str, str]:
    settings = get_settings()
    return {
        "service": settings.app_name,
        "service_version": settings.app_version,
        "env": settings.env,
    }


def _service_context_processor(service_context: dict[str, str]):
    def add_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        del logger, method_name
        for key, value in service_context.items():
            event_dict.setdefault(key, value)
        # Review events are keyed by who submitted or reviewed, when known.
        event_dict.setdefault("request_id", None)
        event_dict.setdefault("user_email", None)
        return event_dict

    return add_context


def configure_logging() -> None:
    """Configure structlog once; every event carries service, version and env."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _service_context_processor(build_service_context()),
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


def bind_request_context(
    request_id: str,
    *,
    method: str | None = None,
    path: str | None = None,
    user_email: str | None = None,
) -> None:
    """Bind per-request fields; submission routes identify the owner by ``userEmail``."""

    context: dict[str, Any] = {"request_id": request_id}
    if method:
        context["http_method"] = method
    if path:
        context["http_path"] = path
    if user_email:
        context["user_email"] = user_email
    structlog.contextvars.bind_contextvars(**context)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
