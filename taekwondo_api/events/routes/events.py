from datetime import UTC, datetime
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.dependencies import require_staff
from taekwondo_api.auth.models.user import User
from taekwondo_api.core.datetime_utils import as_utc
from taekwondo_api.core.exceptions import NotFoundError, ValidationError
from taekwondo_api.core.repository import BaseRepository
from taekwondo_api.core.schemas import ApiResponse
from taekwondo_api.db.session import get_db
from taekwondo_api.events.models.event import Event
from taekwondo_api.events.schemas.event import EventCreate, EventResponse, EventUpdate

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _get_event_or_404(events: BaseRepository[Event], event_id: UUID) -> Event:
    event = await events.get_by_id(event_id)
    if event is None:
        raise NotFoundError("Event not found", resource="event")
    return event


@router.get(
    "", response_model=ApiResponse[list[EventResponse]], response_model_exclude_none=True
)
async def list_events(db: AsyncSession = Depends(get_db)) -> ApiResponse[list[EventResponse]]:
    events = await BaseRepository(db, Event).find_all(order_by=(Event.start_date.asc(),))
    return ApiResponse.listing([EventResponse.model_validate(event) for event in events])


@router.get(
    "/upcoming",
    response_model=ApiResponse[list[EventResponse]],
    response_model_exclude_none=True,
)
async def list_upcoming_events(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[EventResponse]]:
    events = await BaseRepository(db, Event).find_all(
        Event.start_date >= datetime.now(UTC),
        order_by=(Event.start_date.asc(),),
    )
    return ApiResponse.listing([EventResponse.model_validate(event) for event in events])


@router.get(
    "/{event_id}", response_model=ApiResponse[EventResponse], response_model_exclude_none=True
)
async def get_event(
    event_id: UUID, db: AsyncSession = Depends(get_db)
) -> ApiResponse[EventResponse]:
    event = await _get_event_or_404(BaseRepository(db, Event), event_id)
    return ApiResponse(data=EventResponse.model_validate(event))


@router.post(
    "",
    response_model=ApiResponse[EventResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_event(
    data: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> ApiResponse[EventResponse]:
    event = Event(**data.model_dump(), created_by=current_user.id)
    await BaseRepository(db, Event).add(event)
    logger.info("event_created", event_id=str(event.id), created_by=str(current_user.id))
    return ApiResponse(data=EventResponse.model_validate(event), message="Event created")


@router.put(
    "/{event_id}", response_model=ApiResponse[EventResponse], response_model_exclude_none=True
)
async def update_event(
    event_id: UUID,
    data: EventUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> ApiResponse[EventResponse]:
    events = BaseRepository(db, Event)
    event = await _get_event_or_404(events, event_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    start = changes.get("start_date") or event.start_date
    end = changes.get("end_date") or event.end_date
    if as_utc(end) < as_utc(start):
        raise ValidationError("end_date must not be before start_date", field="end_date")

    event = await events.update(event, **changes)
    logger.info("event_updated", event_id=str(event.id), fields=sorted(changes))
    return ApiResponse(data=EventResponse.model_validate(event), message="Event updated")


@router.delete("/{event_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
async def delete_event(
    event_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> ApiResponse[None]:
    events = BaseRepository(db, Event)
    event = await _get_event_or_404(events, event_id)
    await events.delete(event)
    logger.info("event_deleted", event_id=str(event_id), deleted_by=str(current_user.id))
    return ApiResponse(message="Event deleted")
