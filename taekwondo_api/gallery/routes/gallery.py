from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.dependencies import get_optional_user, require_staff
from taekwondo_api.auth.models.user import User
from taekwondo_api.core.constants import GalleryCategory
from taekwondo_api.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from taekwondo_api.core.repository import BaseRepository
from taekwondo_api.core.schemas import ApiResponse
from taekwondo_api.db.session import get_db
from taekwondo_api.events.models.event import Event
from taekwondo_api.gallery.models.gallery_item import GalleryItem
from taekwondo_api.gallery.schemas.gallery import (
    GalleryItemCreate,
    GalleryItemResponse,
    GalleryItemUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _get_item_or_404(items: BaseRepository[GalleryItem], item_id: UUID) -> GalleryItem:
    item = await items.get_by_id(item_id)
    if item is None:
        raise NotFoundError("Gallery item not found", resource="gallery_item")
    return item


async def _check_event_exists(db: AsyncSession, event_id: UUID | None) -> None:
    if event_id is not None and await BaseRepository(db, Event).get_by_id(event_id) is None:
        raise ValidationError("Event not found", field="event_id")


def _to_responses(items: list[GalleryItem]) -> list[GalleryItemResponse]:
    return [GalleryItemResponse.model_validate(item) for item in items]


@router.get(
    "", response_model=ApiResponse[list[GalleryItemResponse]], response_model_exclude_none=True
)
async def list_gallery_items(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[GalleryItemResponse]]:
    items = await BaseRepository(db, GalleryItem).find_all(
        GalleryItem.is_public.is_(True),
        order_by=(GalleryItem.uploaded_at.desc(),),
    )
    return ApiResponse.listing(_to_responses(items))


@router.get(
    "/category/{category}",
    response_model=ApiResponse[list[GalleryItemResponse]],
    response_model_exclude_none=True,
)
async def list_gallery_items_by_category(
    category: GalleryCategory,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[GalleryItemResponse]]:
    items = await BaseRepository(db, GalleryItem).find_all(
        GalleryItem.is_public.is_(True),
        GalleryItem.category == category,
        order_by=(GalleryItem.uploaded_at.desc(),),
    )
    return ApiResponse.listing(_to_responses(items))


@router.get(
    "/{item_id}", response_model=ApiResponse[GalleryItemResponse], response_model_exclude_none=True
)
async def get_gallery_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> ApiResponse[GalleryItemResponse]:
    item = await _get_item_or_404(BaseRepository(db, GalleryItem), item_id)

    if not item.is_public and (
        current_user is None or not item.can_be_managed_by(current_user.id, current_user.role)
    ):
        raise ForbiddenError("Not authorized to access this gallery item")

    return ApiResponse(data=GalleryItemResponse.model_validate(item))


@router.post(
    "",
    response_model=ApiResponse[GalleryItemResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_gallery_item(
    data: GalleryItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> ApiResponse[GalleryItemResponse]:
    await _check_event_exists(db, data.event_id)

    item = GalleryItem(**data.model_dump(), uploaded_by=current_user.id)
    await BaseRepository(db, GalleryItem).add(item)
    logger.info("gallery_item_created", item_id=str(item.id), uploaded_by=str(current_user.id))
    return ApiResponse(
        data=GalleryItemResponse.model_validate(item), message="Gallery item created"
    )


@router.put(
    "/{item_id}", response_model=ApiResponse[GalleryItemResponse], response_model_exclude_none=True
)
async def update_gallery_item(
    item_id: UUID,
    data: GalleryItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> ApiResponse[GalleryItemResponse]:
    items = BaseRepository(db, GalleryItem)
    item = await _get_item_or_404(items, item_id)
    if not item.can_be_managed_by(current_user.id, current_user.role):
        raise ForbiddenError("User not authorized to update this gallery item")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    media_type = changes.get("media_type", item.media_type)
    thumbnail_url = changes.get("thumbnail_url", item.thumbnail_url)
    if media_type == "video" and not thumbnail_url:
        raise ValidationError("thumbnail_url is required for videos", field="thumbnail_url")
    await _check_event_exists(db, changes.get("event_id"))

    item = await items.update(item, **changes)
    logger.info("gallery_item_updated", item_id=str(item.id), fields=sorted(changes))
    return ApiResponse(
        data=GalleryItemResponse.model_validate(item), message="Gallery item updated"
    )


@router.delete("/{item_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
async def delete_gallery_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> ApiResponse[None]:
    items = BaseRepository(db, GalleryItem)
    item = await _get_item_or_404(items, item_id)
    if not item.can_be_managed_by(current_user.id, current_user.role):
        raise ForbiddenError("User not authorized to delete this gallery item")

    await items.delete(item)
    logger.info("gallery_item_deleted", item_id=str(item_id), deleted_by=str(current_user.id))
    return ApiResponse(message="Gallery item deleted")
