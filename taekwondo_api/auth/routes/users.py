from uuid import UUID

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.dependencies import get_current_user, require_admin
from taekwondo_api.auth.models.user import User
from taekwondo_api.auth.routes.auth import change_password
from taekwondo_api.auth.schemas.auth import ChangePasswordRequest
from taekwondo_api.auth.schemas.user import (
    ProfileUpdateRequest,
    RoleUpdateRequest,
    UserResponse,
)
from taekwondo_api.auth.services.user_repository import UserRepository
from taekwondo_api.core.exceptions import NotFoundError, ValidationError
from taekwondo_api.core.schemas import ApiResponse
from taekwondo_api.db.session import get_db

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.put("/updatepassword", response_model=ApiResponse[None], response_model_exclude_none=True)
async def update_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    return await change_password(data, current_user, db)


@router.put("/me", response_model=ApiResponse[UserResponse], response_model_exclude_none=True)
async def update_profile(
    data: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    user = await UserRepository(db).update(current_user, **changes)
    logger.info("profile_updated", user_id=str(user.id), fields=sorted(changes))
    return ApiResponse(data=UserResponse.model_validate(user), message="Profile updated")


@router.get(
    "", response_model=ApiResponse[list[UserResponse]], response_model_exclude_none=True
)
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[list[UserResponse]]:
    users = await UserRepository(db).list_users()
    return ApiResponse.listing([UserResponse.model_validate(user) for user in users])


@router.put(
    "/{user_id}/role", response_model=ApiResponse[UserResponse], response_model_exclude_none=True
)
async def update_user_role(
    user_id: UUID,
    data: RoleUpdateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[UserResponse]:
    if user_id == current_user.id and data.role != current_user.role:
        raise ValidationError("You cannot change your own role", field="role")

    users = UserRepository(db)
    user = await users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found", resource="user")

    previous_role = user.role
    user = await users.update(user, role=data.role)
    logger.info(
        "user_role_changed",
        user_id=str(user.id),
        previous_role=previous_role,
        role=user.role,
        changed_by=str(current_user.id),
    )
    return ApiResponse(data=UserResponse.model_validate(user))
