"""Password policy, hashing and temporary password generation."""

import re
import secrets
import string

from werkzeug.security import check_password_hash, generate_password_hash

from hrms.middleware.error_handler import ValidationAPIError

MIN_LENGTH = 12
MAX_LENGTH = 256
SPECIAL_CHARS = "!@#$%&*?"

_HAS_LOWER = re.compile(r"[a-z]")
_HAS_UPPER = re.compile(r"[A-Z]")
_HAS_DIGIT = re.compile(r"\d")
_HAS_SPECIAL = re.compile(r"[^A-Za-z0-9]")


def validate_password_policy(password: str) -> str:
    pwd = str(password or "")
    if not pwd:
        raise ValidationAPIError("Missing password", field="password")
    if len(pwd) < MIN_LENGTH:
        raise ValidationAPIError(f"Password must be at least {MIN_LENGTH} characters", field="password")
    if len(pwd) > MAX_LENGTH:
        raise ValidationAPIError("Password is too long", field="password")
    if not all(p.search(pwd) for p in (_HAS_LOWER, _HAS_UPPER, _HAS_DIGIT, _HAS_SPECIAL)):
        raise ValidationAPIError(
            "Password must include uppercase, lowercase, number, and special character",
            field="password",
        )
    return pwd


def hash_password(password: str) -> str:
    pwd = validate_password_policy(password)
    return generate_password_hash(pwd, method="scrypt", salt_length=16)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, str(password or ""))
    except ValueError:
        # unknown hash method
        return False


def generate_temporary_password(length: int = 14) -> str:
    """Random password that always satisfies the policy."""
    pools = [string.ascii_uppercase, string.ascii_lowercase, string.digits, SPECIAL_CHARS]
    chars = [secrets.choice(pool) for pool in pools]
    alphabet = "".join(pools)
    chars.extend(secrets.choice(alphabet) for _ in range(max(length, MIN_LENGTH) - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
