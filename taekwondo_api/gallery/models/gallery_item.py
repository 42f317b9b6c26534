import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from taekwondo_api.db.session import Base


class GalleryItem(Base):
    __tablename__ = "gallery_items"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    title: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(String(500), default=None)
    media_type: Mapped[str] = mapped_column(String(10))
    media_url: Mapped[str] = mapped_column(String(1024))
    thumbnail_url: Mapped[str | None] = mapped_column(String(1024), default=None)
    category: Mapped[str] = mapped_column(String(30), default="other", index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    event_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("events.id", ondelete="SET NULL"), default=None, index=True
    )
    is_public: Mapped[bool] = mapped_column(default=True, index=True)
    uploaded_by: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    uploaded_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    def can_be_managed_by(self, user_id: uuid.UUID, role: str) -> bool:
        return role == "admin" or self.uploaded_by == user_id

    def __repr__(self) -> str:
        return f"<GalleryItem(id={self.id}, title={self.title}, media_type={self.media_type})>"
