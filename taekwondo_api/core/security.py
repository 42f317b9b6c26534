import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Literal

from fastapi import Response
from passlib.context import CryptContext

from taekwondo_api.core.config import settings

TOKEN_COOKIE_NAME = "token"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Return whether ``plain_password`` matches the stored hash.

    An account without a stored hash cannot authenticate by password, so
    that case is a plain ``False`` rather than an error.
    """
    if not hashed_password:
        return False
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except (ValueError, TypeError):
        # Stored value is not a hash this context recognises
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


def is_password_hash(value: str) -> bool:
    return pwd_context.identify(value) is not None


def validate_password(password: str) -> str | None:
    """Return an error message when the password breaks the policy."""
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        return f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
    return None


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def generate_reset_token() -> tuple[str, str, datetime]:
    """Create a password reset secret.

    Returns the raw secret (emailed to the user), its SHA-256 digest (stored)
    and the expiry instant.
    """
    raw_token = secrets.token_hex(32)
    hashed_token = hash_token(raw_token)
    expiry = datetime.now(UTC) + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)
    return raw_token, hashed_token, expiry


def _cookie_samesite() -> Literal["lax", "none"]:
    """Return SameSite policy: 'none' for cross-site production, 'lax' for same-site/dev."""
    return "none" if settings.is_production else "lax"


def set_token_cookie(response: Response, token: str, max_age: int) -> None:
    """Set the httpOnly session cookie used as a fallback to the Authorization header"""
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite=_cookie_samesite(),
        max_age=max_age,
    )


def clear_token_cookie(response: Response) -> None:
    response.delete_cookie(
        TOKEN_COOKIE_NAME, samesite=_cookie_samesite(), secure=settings.is_production
    )
