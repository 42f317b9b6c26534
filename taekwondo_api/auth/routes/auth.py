from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.dependencies import get_current_user
from taekwondo_api.auth.models.user import User
from taekwondo_api.auth.schemas.auth import (
    AuthPayload,
    ChangePasswordRequest,
    GoogleAuthRequest,
    LoginRequest,
    RegisterRequest,
)
from taekwondo_api.auth.schemas.user import UserResponse
from taekwondo_api.auth.services.google_service import GoogleTokenVerifier, get_google_verifier
from taekwondo_api.auth.services.token_service import token_service
from taekwondo_api.auth.services.user_repository import UserRepository
from taekwondo_api.core import security
from taekwondo_api.core.config import settings
from taekwondo_api.core.constants import ROLE_USER
from taekwondo_api.core.exceptions import (
    AppError,
    UnauthorizedError,
    ValidationError,
)
from taekwondo_api.core.rate_limit import limiter
from taekwondo_api.core.schemas import ApiResponse
from taekwondo_api.db.session import get_db

logger = structlog.get_logger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid credentials"


def _auth_response(user: User, response: Response) -> ApiResponse[AuthPayload]:
    token = token_service.issue(user.id)
    security.set_token_cookie(response, token, int(token_service.lifetime.total_seconds()))
    return ApiResponse(data=AuthPayload(token=token, user=UserResponse.model_validate(user)))


def _check_password_policy(password: str) -> None:
    password_error = security.validate_password(password)
    if password_error:
        raise ValidationError(password_error, field="password")


async def change_password(
    data: ChangePasswordRequest, current_user: User, db: AsyncSession
) -> ApiResponse[None]:
    """Replace the caller's password after confirming the current one."""
    if not current_user.has_password:
        raise ValidationError(
            "This account signs in with Google and has no password to change",
            field="current_password",
        )
    _check_password_policy(data.new_password)

    if not current_user.match_password(data.current_password):
        raise UnauthorizedError("Current password is incorrect")

    await UserRepository(db).update(current_user, password=data.new_password)
    logger.info("password_changed", user_id=str(current_user.id))
    return ApiResponse(message="Password updated successfully")


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.RATE_LIMIT_REGISTER)
async def register(
    request: Request,
    data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    _check_password_policy(data.password)

    users = UserRepository(db)
    if await users.find_by_email(data.email):
        raise ValidationError("Email already in use", field="email")

    user = User(
        name=data.name,
        email=data.email,
        password=data.password,
        phone_number=data.phone_number,
        role=ROLE_USER,
    )
    try:
        await users.add(user)
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same address
        await db.rollback()
        raise ValidationError("Email already in use", field="email") from e

    logger.info("user_registered", user_id=str(user.id))
    return _auth_response(user, response)


@router.post("/login", response_model=ApiResponse[AuthPayload], response_model_exclude_none=True)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    users = UserRepository(db)
    user = await users.find_by_email(credentials.email)

    if user is None or not user.match_password(credentials.password):
        logger.info("login_failed", reason="unknown_email" if user is None else "bad_password")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    # Serialize first: a failed stamp rolls the session back and expires the user
    user_id = str(user.id)
    payload = _auth_response(user, response)
    try:
        await users.update(user, last_login=datetime.now(UTC))
    except (AppError, SQLAlchemyError):
        logger.warning("last_login_update_failed", user_id=user_id, exc_info=True)

    logger.info("user_logged_in", user_id=user_id)
    return payload


@router.post("/google", response_model=ApiResponse[AuthPayload], response_model_exclude_none=True)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def google_auth(
    request: Request,
    data: GoogleAuthRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
) -> ApiResponse[AuthPayload]:
    identity = await verifier.verify(data.id_token)
    users = UserRepository(db)

    user = await users.find_by_google_id(identity.google_id)
    if user is None:
        user = await users.find_by_email(identity.email)

    if user is None:
        user = User(
            name=(identity.name or data.name or identity.email.split("@")[0])[:50],
            email=identity.email,
            google_id=identity.google_id,
            photo_url=identity.picture or data.photo_url,
            role=ROLE_USER,
        )
        await users.add(user)
        logger.info("user_registered", user_id=str(user.id), provider="google")
    elif user.google_id != identity.google_id:
        if user.google_id is not None:
            # The email now belongs to a different Google account than the one linked
            logger.warning("google_account_mismatch", user_id=str(user.id))
            raise UnauthorizedError("Account is linked to a different Google login")
        await users.update(
            user,
            google_id=identity.google_id,
            photo_url=user.photo_url or identity.picture or data.photo_url,
        )
        logger.info("google_account_linked", user_id=str(user.id))

    logger.info("user_logged_in", user_id=str(user.id), provider="google")
    return _auth_response(user, response)


@router.get("/me", response_model=ApiResponse[UserResponse], response_model_exclude_none=True)
async def get_me(current_user: User = Depends(get_current_user)) -> ApiResponse[UserResponse]:
    return ApiResponse(data=UserResponse.model_validate(current_user))


@router.post("/logout", response_model=ApiResponse[None], response_model_exclude_none=True)
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
) -> ApiResponse[None]:
    # Tokens are stateless: logging out only drops the cookie copy
    security.clear_token_cookie(response)
    logger.info("user_logged_out", user_id=str(current_user.id))
    return ApiResponse(message="User logged out successfully")


@router.post(
    "/change-password", response_model=ApiResponse[None], response_model_exclude_none=True
)
async def change_password_route(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    return await change_password(data, current_user, db)
