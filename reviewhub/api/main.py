"""FastAPI application entrypoint for the reviewhub submission platform."""

from __future__ import annotations

import traceback
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reviewhub.admins.router import router as admin_router
from reviewhub.comments.router import router as comments_router
from reviewhub.core.config import get_settings
from reviewhub.core.logger import bind_request_context, clear_request_context, configure_logging, get_logger
from reviewhub.core.metrics import record_http_request, render_prometheus_metrics
from reviewhub.core.observability import capture_exception, init_sentry, sentry_scope
from reviewhub.notifications.router import router as notifications_router
from reviewhub.storage.bootstrap import bootstrap_schema
from reviewhub.storage.db import load_models
from reviewhub.storage.db import test_connection as test_db_connection
from reviewhub.storage.errors import (
    DatabaseUnavailableError,
    DuplicateRecordError,
    FeatureUnavailableError,
    InvalidStatusTransitionError,
)
from reviewhub.submissions.router import router as submissions_router
from reviewhub.validation_queue.router import router as validation_queue_router


settings = get_settings()
logger = get_logger("reviewhub.api")

app = FastAPI(title=settings.app_name, version=settings.app_version)


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    started_at = perf_counter()
    request_id = request.headers.get("x-request-id", str(uuid4()))
    user_email = request.query_params.get("userEmail")
    bind_request_context(request_id, method=request.method, path=request.url.path, user_email=user_email)

    response = None
    status_code = 500

    try:
        with sentry_scope(request_id=request_id, user_email=user_email):
            response = await call_next(request)
        status_code = int(response.status_code)
    finally:
        duration = perf_counter() - started_at
        if settings.metrics_enabled:
            record_http_request(
                method=request.method,
                path=_route_template(request),
                status_code=status_code,
                duration_seconds=duration,
            )
        clear_request_context()

    response.headers["x-request-id"] = request_id
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    del request
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    del request
    errors = exc.errors()
    missing = any(error.get("type") == "missing" for error in errors)
    details = [
        {"loc": [str(part) for part in error.get("loc", ())], "message": error.get("msg", "")}
        for error in errors
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "Missing required fields" if missing else "Invalid request payload",
            "details": details,
        },
    )


@app.exception_handler(InvalidStatusTransitionError)
async def status_conflict_handler(request: Request, exc: InvalidStatusTransitionError) -> JSONResponse:
    del request
    return JSONResponse(
        status_code=409,
        content={
            "error": str(exc),
            "current_status": exc.current_status,
            "requested_status": exc.requested_status,
        },
    )


@app.exception_handler(DuplicateRecordError)
async def duplicate_handler(request: Request, exc: DuplicateRecordError) -> JSONResponse:
    del request
    return JSONResponse(status_code=409, content={"error": str(exc)})


@app.exception_handler(FeatureUnavailableError)
@app.exception_handler(DatabaseUnavailableError)
async def unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("storage_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={"error": "Service temporarily unavailable", "details": str(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, method=request.method, exc_info=exc)
    capture_exception(exc)
    content = {"error": "Internal server error", "details": str(exc)}
    if settings.is_development:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


@app.on_event("startup")
def on_startup() -> None:
    configure_logging()
    load_models()
    try:
        bootstrap_schema()
    except Exception as exc:
        # Requests still fail individually with 503 until the database answers.
        logger.error("schema_bootstrap_failed", error=str(exc))
    sentry_enabled = init_sentry()
    logger.info(
        "application_startup",
        env=settings.env,
        version=settings.app_version,
        sentry_enabled=sentry_enabled,
        metrics_enabled=settings.metrics_enabled,
    )


@app.get("/health")
def health() -> JSONResponse:
    db_ok, db_error = test_db_connection()
    payload = {
        "status": "ok" if db_ok else "degraded",
        "env": settings.env,
        "services": {"database": {"ok": db_ok, "error": db_error}},
    }
    return JSONResponse(content=payload, status_code=200 if db_ok else 503)


@app.get("/version")
def version() -> dict[str, str]:
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "env": settings.env,
    }


@app.get("/metrics")
def metrics() -> PlainTextResponse:
    if not settings.metrics_enabled:
        return PlainTextResponse("metrics disabled\n", status_code=404)

    payload = render_prometheus_metrics(
        app_name=settings.app_name,
        app_version=settings.app_version,
        env=settings.env,
    )
    return PlainTextResponse(
        payload,
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


app.include_router(submissions_router)
app.include_router(comments_router)
app.include_router(validation_queue_router)
app.include_router(admin_router)
app.include_router(notifications_router)
