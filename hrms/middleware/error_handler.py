"""API error hierarchy and global exception handlers."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status_code: int = 400,
        details: dict = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str | int):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "id": identifier},
        )


class ValidationAPIError(APIError):
    """Input rejected before any side effect ran."""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=422,
            details={"field": field} if field else {},
        )


class AuthenticationError(APIError):
    """Missing, invalid or expired credentials."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message=message, code="UNAUTHENTICATED", status_code=401)


class ForbiddenError(APIError):
    """Access forbidden."""

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
        )


class ConflictError(APIError):
    """Request conflicts with the current state of a resource."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, code="CONFLICT", status_code=409, details=details)


class InvalidTransitionError(APIError):
    """Status write outside the declared transition table."""

    def __init__(self, entity: str, from_status: str, to_status: str):
        super().__init__(
            message=f"Cannot move {entity} from '{from_status}' to '{to_status}'",
            code="INVALID_TRANSITION",
            status_code=409,
            details={"entity": entity, "from": from_status, "to": to_status},
        )


class PreconditionFailedError(APIError):
    """Business rule that must hold before an operation was not met."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(
            message=message,
            code="PRECONDITION_FAILED",
            status_code=409,
            details=details,
        )


class ExternalServiceError(APIError):
    """Storage, email or procedure call failed; the provider message is passed through."""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=message,
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details={"service": service},
        )


def error_response(status_code: int, code: str, message: str, details: dict[str, Any] = None) -> JSONResponse:
    """Render the error envelope shared by every handler."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "details": details or {}}},
    )


def _first_validation_error(errors: list[dict]) -> tuple[str, str]:
    first_error = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first_error.get("loc", []) if loc != "body")
    return field, first_error.get("msg", "Validation error")


def setup_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        log_method = logger.error if exc.status_code >= 500 else logger.warning
        log_method(
            "API error",
            code=exc.code,
            message=exc.message,
            path=request.url.path,
        )
        return error_response(exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        field, message = _first_validation_error(list(exc.errors()))
        logger.warning("Request validation failed", field=field, message=message, path=request.url.path)
        return error_response(422, "VALIDATION_ERROR", message, {"field": field})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        field, message = _first_validation_error(exc.errors())
        logger.warning("Validation error", field=field, message=message, path=request.url.path)
        return error_response(422, "VALIDATION_ERROR", message, {"field": field})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error", error=str(exc), path=request.url.path)
        return error_response(500, "DATABASE_ERROR", "A database error occurred")

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")
