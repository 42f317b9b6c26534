from collections.abc import Awaitable, Callable
from typing import Annotated

import structlog
from fastapi import Cookie, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.models.user import User
from taekwondo_api.auth.services.token_service import TokenFailure, token_service
from taekwondo_api.core.exceptions import ForbiddenError, UnauthorizedError
from taekwondo_api.core.repository import BaseRepository
from taekwondo_api.core.security import TOKEN_COOKIE_NAME
from taekwondo_api.db.session import get_db

logger = structlog.get_logger(__name__)

TOKEN_EXPIRED_MESSAGE = "Token expired, please login again"


def get_bearer_token(
    request: Request,
    token: Annotated[str | None, Cookie(alias=TOKEN_COOKIE_NAME)] = None,
) -> str | None:
    """Extract the bearer token; the Authorization header wins over the cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return token or None


async def _resolve_user(token: str | None, db: AsyncSession) -> User:
    decision = token_service.verify(token)

    if decision.failure is TokenFailure.EXPIRED:
        raise UnauthorizedError(TOKEN_EXPIRED_MESSAGE)
    if decision.failure is TokenFailure.MALFORMED:
        logger.info("authentication_failed", reason="invalid_token")
        raise UnauthorizedError()
    if not decision.ok or decision.user_id is None:
        logger.info("authentication_failed", reason="no_token")
        raise UnauthorizedError()

    user = await BaseRepository(db, User).get_by_id(decision.user_id)
    if user is None:
        logger.info("authentication_failed", reason="user_not_found", user_id=str(decision.user_id))
        raise UnauthorizedError()

    return user


async def get_current_user(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from the bearer token"""
    user = await _resolve_user(token, db)
    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


async def get_optional_user(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like get_current_user, but anonymous or invalid credentials yield None"""
    if not token:
        return None
    try:
        return await _resolve_user(token, db)
    except UnauthorizedError:
        return None


def require_roles(*roles: str) -> Callable[..., Awaitable[User]]:
    """Build a dependency that admits only users holding one of ``roles``.

    Example:
        @router.post("/", dependencies=[Depends(require_roles("admin", "instructor"))])
    """

    async def check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.info(
                "authorization_failed",
                role=current_user.role,
                required_roles=list(roles),
            )
            raise ForbiddenError(
                f"User role '{current_user.role}' is not authorized to access this route",
                role=current_user.role,
                required_roles=list(roles),
            )
        return current_user

    return check_role


require_admin = require_roles("admin")
require_staff = require_roles("admin", "instructor")
