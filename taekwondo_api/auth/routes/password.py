import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.schemas.auth import ForgotPasswordRequest, ResetPasswordRequest
from taekwondo_api.auth.services.email_service import (
    EmailService,
    build_password_reset_email,
    get_email_service,
)
from taekwondo_api.auth.services.user_repository import UserRepository
from taekwondo_api.core import security
from taekwondo_api.core.config import settings
from taekwondo_api.core.exceptions import ValidationError
from taekwondo_api.core.rate_limit import limiter
from taekwondo_api.core.schemas import ApiResponse
from taekwondo_api.db.session import get_db

logger = structlog.get_logger(__name__)

router = APIRouter()

GENERIC_RESET_MESSAGE = (
    "If an account with that email exists, password reset instructions have been sent"
)
INVALID_RESET_TOKEN = "Invalid or expired token"


@router.post(
    "/forgot-password", response_model=ApiResponse[None], response_model_exclude_none=True
)
@limiter.limit(settings.RATE_LIMIT_PASSWORD_RESET)
async def forgot_password(
    request: Request,
    reset_request: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[None]:
    users = UserRepository(db)
    user = await users.find_by_email(reset_request.email)

    # Same answer whether or not the account exists
    if user is None:
        logger.info("password_reset_unknown_email")
        return ApiResponse(message=GENERIC_RESET_MESSAGE)

    raw_token, hashed_token, expiry = security.generate_reset_token()
    await users.update(user, reset_password_token=hashed_token, reset_password_expire=expiry)

    email_message = build_password_reset_email(name=user.name, email=user.email, token=raw_token)
    if await email_service.send_email(email_message):
        logger.info("password_reset_requested", user_id=str(user.id))
    else:
        logger.warning("password_reset_email_failed", user_id=str(user.id))

    return ApiResponse(message=GENERIC_RESET_MESSAGE)


@router.get(
    "/reset-password/{token}/verify",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
)
async def verify_reset_token(token: str, db: AsyncSession = Depends(get_db)) -> ApiResponse[None]:
    if await UserRepository(db).find_by_reset_token(token) is None:
        raise ValidationError(INVALID_RESET_TOKEN)
    return ApiResponse(message="Token is valid")


@router.post(
    "/reset-password/{token}", response_model=ApiResponse[None], response_model_exclude_none=True
)
@limiter.limit(settings.RATE_LIMIT_PASSWORD_RESET)
async def reset_password(
    request: Request,
    token: str,
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    users = UserRepository(db)
    user = await users.find_by_reset_token(token)
    if user is None:
        raise ValidationError(INVALID_RESET_TOKEN)

    if not data.password:
        raise ValidationError("Please provide a new password", field="password")

    # Clearing the grant in the same write makes the secret single-use
    await users.update(
        user,
        password=data.password,
        reset_password_token=None,
        reset_password_expire=None,
    )
    logger.info("password_reset_completed", user_id=str(user.id))

    return ApiResponse(message="Password reset successful")
