from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taekwondo_api.auth.dependencies import get_current_user, require_admin
from taekwondo_api.auth.models.user import User
from taekwondo_api.core.exceptions import ForbiddenError, NotFoundError
from taekwondo_api.core.repository import BaseRepository
from taekwondo_api.core.schemas import ApiResponse
from taekwondo_api.db.session import get_db
from taekwondo_api.enrollments.models.enrollment import Enrollment
from taekwondo_api.enrollments.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
    EnrollmentWithApplicant,
)

logger = structlog.get_logger(__name__)

router = APIRouter()

# A reference number collision is retried with a freshly generated number
_REFERENCE_ATTEMPTS = 3


@router.get("/health")
async def enrollment_health() -> dict[str, Any]:
    return {
        "success": True,
        "message": "Enrollment API is working properly",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.post(
    "",
    response_model=ApiResponse[EnrollmentResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_enrollment(
    data: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[EnrollmentResponse]:
    enrollments = BaseRepository(db, Enrollment)
    user_id = current_user.id

    for attempt in range(1, _REFERENCE_ATTEMPTS + 1):
        enrollment = Enrollment(**data.model_dump(), user_id=user_id)
        try:
            await enrollments.add(enrollment)
            break
        except IntegrityError:
            await db.rollback()
            if attempt == _REFERENCE_ATTEMPTS:
                raise
            logger.warning("enrollment_reference_collision", attempt=attempt)

    logger.info(
        "enrollment_submitted",
        enrollment_id=str(enrollment.id),
        reference_number=enrollment.reference_number,
        user_id=str(user_id),
    )
    return ApiResponse(
        data=EnrollmentResponse.model_validate(enrollment),
        message="Enrollment submitted successfully",
    )


@router.get(
    "", response_model=ApiResponse[list[EnrollmentResponse]], response_model_exclude_none=True
)
async def list_my_enrollments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[list[EnrollmentResponse]]:
    enrollments = await BaseRepository(db, Enrollment).find_all(
        Enrollment.user_id == current_user.id,
        order_by=(Enrollment.created_at.desc(),),
    )
    return ApiResponse.listing([EnrollmentResponse.model_validate(e) for e in enrollments])


# Declared before "/{enrollment_id}" so "all" is not parsed as an id
@router.get(
    "/all",
    response_model=ApiResponse[list[EnrollmentWithApplicant]],
    response_model_exclude_none=True,
)
async def list_all_enrollments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[list[EnrollmentWithApplicant]]:
    enrollments = await BaseRepository(db, Enrollment).find_all(
        order_by=(Enrollment.created_at.desc(),),
        options=(selectinload(Enrollment.applicant),),
    )
    return ApiResponse.listing([EnrollmentWithApplicant.model_validate(e) for e in enrollments])


@router.get(
    "/{enrollment_id}",
    response_model=ApiResponse[EnrollmentResponse],
    response_model_exclude_none=True,
)
async def get_enrollment(
    enrollment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[EnrollmentResponse]:
    enrollment = await BaseRepository(db, Enrollment).get_by_id(enrollment_id)
    if enrollment is None:
        raise NotFoundError("Enrollment not found", resource="enrollment")

    if enrollment.user_id != current_user.id and current_user.role != "admin":
        raise ForbiddenError("Not authorized to access this enrollment")

    return ApiResponse(data=EnrollmentResponse.model_validate(enrollment))


@router.put(
    "/{enrollment_id}",
    response_model=ApiResponse[EnrollmentResponse],
    response_model_exclude_none=True,
)
async def update_enrollment_status(
    enrollment_id: UUID,
    data: EnrollmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[EnrollmentResponse]:
    enrollments = BaseRepository(db, Enrollment)
    enrollment = await enrollments.get_by_id(enrollment_id)
    if enrollment is None:
        raise NotFoundError("Enrollment not found", resource="enrollment")

    enrollment = await enrollments.update(enrollment, status=data.status)
    logger.info(
        "enrollment_status_updated",
        enrollment_id=str(enrollment.id),
        status=enrollment.status,
        updated_by=str(current_user.id),
    )
    return ApiResponse(
        data=EnrollmentResponse.model_validate(enrollment),
        message=f"Enrollment status updated to {enrollment.status}",
    )
