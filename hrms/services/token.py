"""HS256 session tokens and one-time link tokens."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt, JWTError

from hrms.config.settings import settings


def create_token(data: dict[str, Any], expires_delta: timedelta = None) -> str:
    """
    Create an HS256-signed JWT token.

    Args:
        data: Claims to include in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_session_token(user_id: str, email: str) -> str:
    """Session token carried in the auth cookie."""
    return create_token({"sub": user_id, "email": email, "typ": "session"})


def create_state_token(data: dict[str, Any], minutes: int = 10) -> str:
    """Short-lived signed token used as the OAuth ``state`` parameter."""
    return create_token({**data, "typ": "oauth_state"}, timedelta(minutes=minutes))


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an HS256-signed JWT token.

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.JWTClaimsError as e:
        raise JWTError(f"Invalid token claims: {e}")
    except JWTError as e:
        raise JWTError(f"Invalid token: {e}")


def should_refresh_token(payload: dict[str, Any]) -> bool:
    """Check if token should be refreshed (less than 50% lifetime remaining)."""
    exp = payload.get("exp")
    iat = payload.get("iat")

    if not exp or not iat:
        return False

    now = datetime.now(timezone.utc).timestamp()
    return (exp - now) < ((exp - iat) * 0.5)


def generate_link_token() -> str:
    """Random token for magic-link and password-reset URLs."""
    return secrets.token_urlsafe(32)


def hash_link_token(token: str) -> str:
    """Only the hash of a link token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
