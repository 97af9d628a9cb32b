"""Upper bound on request handling time."""

import asyncio

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from hrms.config.settings import settings
from hrms.middleware.error_handler import error_response

logger = structlog.get_logger()


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Fails a request with 504 instead of letting a hung dependency stall it."""

    def __init__(self, app, timeout_seconds: float = None):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds or settings.REQUEST_TIMEOUT_SECONDS

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                "Request timed out",
                method=request.method,
                path=request.url.path,
                timeout_seconds=self.timeout_seconds,
            )
            return error_response(504, "TIMEOUT", "The request took too long to complete")
