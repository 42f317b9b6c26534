from datetime import UTC, datetime
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.dependencies import get_current_user, require_admin
from taekwondo_api.auth.models.user import User
from taekwondo_api.auth.services.email_service import (
    EmailService,
    build_contact_notification_email,
    get_email_service,
)
from taekwondo_api.contact.models.contact_message import ContactMessage
from taekwondo_api.contact.schemas.contact import (
    ContactMessageCreate,
    ContactMessageResponse,
    ContactStatusUpdate,
)
from taekwondo_api.core.config import settings
from taekwondo_api.core.exceptions import NotFoundError
from taekwondo_api.core.repository import BaseRepository
from taekwondo_api.core.schemas import ApiResponse
from taekwondo_api.db.session import get_db

logger = structlog.get_logger(__name__)

router = APIRouter()

# Statuses that close the conversation and stamp a response date
_RESOLVED_STATUSES = {"replied", "closed"}


async def _get_message_or_404(
    messages: BaseRepository[ContactMessage], message_id: UUID
) -> ContactMessage:
    message = await messages.get_by_id(message_id)
    if message is None:
        raise NotFoundError("Contact submission not found", resource="contact_message")
    return message


async def _notify_admin(email_service: EmailService, message: ContactMessage) -> None:
    if not settings.ADMIN_EMAIL:
        return
    notification = build_contact_notification_email(
        admin_email=settings.ADMIN_EMAIL,
        sender_name=message.name,
        sender_email=message.email,
        subject=message.subject,
        message=message.message,
        enquiry_type=message.enquiry_type,
    )
    if not await email_service.send_email(notification):
        logger.warning("contact_notification_failed", message_id=str(message.id))


@router.post(
    "",
    response_model=ApiResponse[ContactMessageResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def submit_contact_form(
    data: ContactMessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[ContactMessageResponse]:
    message = ContactMessage(**data.model_dump())
    await BaseRepository(db, ContactMessage).add(message)
    logger.info(
        "contact_message_received", message_id=str(message.id), user_id=str(current_user.id)
    )

    await _notify_admin(email_service, message)

    return ApiResponse(
        data=ContactMessageResponse.model_validate(message),
        message="Your message has been sent successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[list[ContactMessageResponse]],
    response_model_exclude_none=True,
)
async def list_contact_messages(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[list[ContactMessageResponse]]:
    messages = await BaseRepository(db, ContactMessage).find_all(
        order_by=(ContactMessage.created_at.desc(),)
    )
    return ApiResponse.listing([ContactMessageResponse.model_validate(m) for m in messages])


@router.get(
    "/{message_id}",
    response_model=ApiResponse[ContactMessageResponse],
    response_model_exclude_none=True,
)
async def get_contact_message(
    message_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[ContactMessageResponse]:
    message = await _get_message_or_404(BaseRepository(db, ContactMessage), message_id)
    return ApiResponse(data=ContactMessageResponse.model_validate(message))


@router.put(
    "/{message_id}",
    response_model=ApiResponse[ContactMessageResponse],
    response_model_exclude_none=True,
)
async def update_contact_status(
    message_id: UUID,
    data: ContactStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[ContactMessageResponse]:
    messages = BaseRepository(db, ContactMessage)
    message = await _get_message_or_404(messages, message_id)

    response_date = datetime.now(UTC) if data.status in _RESOLVED_STATUSES else None
    message = await messages.update(
        message,
        status=data.status,
        responded_by=current_user.id,
        response_date=response_date,
    )
    logger.info("contact_status_updated", message_id=str(message.id), status=message.status)
    return ApiResponse(data=ContactMessageResponse.model_validate(message))


@router.delete(
    "/{message_id}", response_model=ApiResponse[None], response_model_exclude_none=True
)
async def delete_contact_message(
    message_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[None]:
    messages = BaseRepository(db, ContactMessage)
    message = await _get_message_or_404(messages, message_id)
    await messages.delete(message)
    logger.info("contact_message_deleted", message_id=str(message_id))
    return ApiResponse(message="Contact submission deleted")
