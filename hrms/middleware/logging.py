"""Structured logging setup and request logging middleware."""

import logging
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from hrms.config.settings import settings

logger = structlog.get_logger()

# Probes hit these every few seconds
QUIET_PATHS = {"/health", "/api/v1/health/live", "/api/v1/health/ready"}


def configure_logging(level: str = None, json_output: bool = None) -> None:
    """
    Configure structlog once for the process.

    JSON lines in deployed environments, coloured key/value output when
    running locally in debug mode.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    if json_output is None:
        json_output = not (settings.DEBUG and settings.ENVIRONMENT == "development")

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id to every log line of a request and records its outcome."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # Honour an id set by the load balancer so traces line up
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)

        quiet = request.url.path in QUIET_PATHS
        if not quiet:
            logger.debug(
                "Request received",
                method=request.method,
                client=request.client.host if request.client else None,
            )

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400:
            log = logger.warning
        else:
            log = logger.debug if quiet else logger.info
        log(
            "Request handled",
            method=request.method,
            status_code=response.status_code,
            duration_ms=elapsed_ms,
            user=getattr(request.state, "user_id", None),
        )

        response.headers["X-Request-ID"] = request_id
        return response
