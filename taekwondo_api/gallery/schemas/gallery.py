import uuid

from pydantic import BaseModel, Field, model_validator

from taekwondo_api.core.constants import GalleryCategory, MediaType
from taekwondo_api.core.datetime_utils import UTCDatetime


class GalleryItemBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    media_type: MediaType
    media_url: str = Field(..., min_length=1, max_length=1024)
    thumbnail_url: str | None = Field(None, max_length=1024)
    category: GalleryCategory = "other"
    tags: list[str] = Field(default_factory=list)
    event_id: uuid.UUID | None = None
    is_public: bool = True


class GalleryItemCreate(GalleryItemBase):
    @model_validator(mode="after")
    def _videos_need_thumbnail(self) -> "GalleryItemCreate":
        if self.media_type == "video" and not self.thumbnail_url:
            raise ValueError("thumbnail_url is required for videos")
        return self


class GalleryItemUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    media_type: MediaType | None = None
    media_url: str | None = Field(None, min_length=1, max_length=1024)
    thumbnail_url: str | None = Field(None, max_length=1024)
    category: GalleryCategory | None = None
    tags: list[str] | None = None
    event_id: uuid.UUID | None = None
    is_public: bool | None = None


class GalleryItemResponse(GalleryItemBase):
    id: uuid.UUID
    media_type: str
    category: str
    uploaded_by: uuid.UUID
    uploaded_at: UTCDatetime

    class Config:
        from_attributes = True
