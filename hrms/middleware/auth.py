"""Authentication middleware for session token validation."""

import re
from typing import Optional

import structlog
from fastapi import Request
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from hrms.config.settings import settings
from hrms.middleware.error_handler import error_response
from hrms.services.token import create_token, decode_token, should_refresh_token

logger = structlog.get_logger()


# Paths that don't require authentication
SKIP_AUTH_PATHS = [
    r"^/api/v1/auth/(login|magic-link|password-reset|oauth)",
    r"^/api/v1/public/",
    r"^/health",
    r"^/api/v1/health",
    r"^/api/docs",
    r"^/api/openapi\.json",
    r"^/api/redoc",
    r"^/$",
]

SKIP_AUTH_PATTERNS = [re.compile(p) for p in SKIP_AUTH_PATHS]


def should_skip_auth(path: str) -> bool:
    """Check if path should skip authentication."""
    return any(pattern.match(path) for pattern in SKIP_AUTH_PATTERNS)


def get_token_from_request(request: Request) -> Optional[str]:
    """Extract the session token from the cookie or Authorization header."""
    token = request.cookies.get(settings.COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    return None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Validates session tokens on protected routes and rolls them past half-life."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS" or should_skip_auth(request.url.path):
            return await call_next(request)

        token = get_token_from_request(request)
        if not token:
            return error_response(401, "UNAUTHENTICATED", "Not authenticated")

        try:
            payload = decode_token(token)
        except JWTError as e:
            logger.info("Rejected session token", error=str(e), path=request.url.path)
            return error_response(401, "UNAUTHENTICATED", str(e))

        if payload.get("typ") != "session":
            return error_response(401, "UNAUTHENTICATED", "Invalid token type")

        request.state.user = payload
        request.state.user_id = payload.get("sub")
        request.state.user_email = payload.get("email")

        response = await call_next(request)

        # Rolling token refresh
        if should_refresh_token(payload):
            claims = {k: v for k, v in payload.items() if k not in ("exp", "iat")}
            set_session_cookie(response, create_token(claims))

        return response
