"""Password hashing, session JWT creation/verification, and one-time token generation."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from medadmin.core.config import Settings

EMAIL_MAX_LEN = 255
NAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Compared against when an account has no usable hash so the response time
# does not reveal whether the email exists.
_DUMMY_HASH = bcrypt.hashpw(b"medadmin-dummy-password", bcrypt.gensalt(rounds=4))


def hash_password(plain_password: str, rounds: int) -> str:
    """Hash a plain-text password for storage with the configured cost (Settings.BCRYPT_ROUNDS)."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. A missing hash never matches."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    if not hashed:
        bcrypt.checkpw(pw_bytes, _DUMMY_HASH)
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(sub: str | int, settings: Settings) -> str:
    """
    Create a session JWT carrying only the account id (sub), iat and exp.

    The role is deliberately absent: it is loaded from the database on every
    request.
    """
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )


def generate_token() -> str:
    """Random URL-safe token for email verification and password reset links."""
    return secrets.token_urlsafe(32)
