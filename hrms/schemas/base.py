"""Base Pydantic schemas with CamelCase conversion."""

import re
from typing import Any, Generic, Optional, TypeVar

from humps import camelize
from pydantic import BaseModel, ConfigDict

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    return camelize(string)


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Trim and lowercase an email, rejecting malformed addresses."""
    if value is None:
        return None
    email = value.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email address")
    return email


def strip_required(value: str) -> str:
    """Reject blank strings after trimming."""
    value = (value or "").strip()
    if not value:
        raise ValueError("Field cannot be empty")
    return value


class CamelModel(BaseModel):
    """
    Base model that converts snake_case fields to camelCase in JSON responses.

    Usage:
        class MyResponse(CamelModel):
            full_name: str       # JSON: fullName
            joining_date: date   # JSON: joiningDate
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


T = TypeVar("T")


class ListResponse(CamelModel, Generic[T]):
    """List wrapper with total count."""

    data: list[T]
    total: int


class SignedUrlResponse(CamelModel):
    url: str
    expires_in: int


class MessageResponse(CamelModel):
    message: str


class ErrorDetail(CamelModel):
    """Error detail for API error responses."""

    code: str
    message: str
    details: dict[str, Any] = {}


class ErrorResponse(CamelModel):
    """Standard error response format."""

    error: ErrorDetail
