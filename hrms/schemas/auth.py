"""Schemas for sign-in flows and the session context."""

from typing import Optional

from pydantic import field_validator

from .base import CamelModel, normalize_email


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class EmailLinkRequest(CamelModel):
    email: str
    redirect_to: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class TokenRequest(CamelModel):
    token: str


class PasswordResetConfirm(CamelModel):
    token: str
    new_password: str


class OAuthCallbackRequest(CamelModel):
    code: str
    state: str


class SessionUser(CamelModel):
    user_id: str
    email: str
    employee_id: Optional[str] = None
    role: Optional[str] = None


class SessionResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: SessionUser
    redirect_to: Optional[str] = None
