import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taekwondo_api.db.session import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    title: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(Text)
    event_type: Mapped[str] = mapped_column(String(30), index=True)

    # Location
    address: Mapped[str | None] = mapped_column(String(255), default=None)
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str] = mapped_column(String(100))
    zip_code: Mapped[str | None] = mapped_column(String(20), default=None)
    country: Mapped[str] = mapped_column(String(100))
    venue_details: Mapped[str | None] = mapped_column(Text, default=None)

    # Schedule
    start_date: Mapped[datetime] = mapped_column(index=True)
    end_date: Mapped[datetime] = mapped_column()
    start_time: Mapped[str | None] = mapped_column(String(10), default=None)
    end_time: Mapped[str | None] = mapped_column(String(10), default=None)

    # Eligibility
    belt_ranks: Mapped[list[str]] = mapped_column(JSON, default=list)
    age_groups: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Registration
    is_registration_required: Mapped[bool] = mapped_column(default=True)
    registration_link: Mapped[str | None] = mapped_column(String(1024), default=None)
    registration_deadline: Mapped[datetime | None] = mapped_column(default=None)
    fee_amount: Mapped[float | None] = mapped_column(default=None)
    fee_currency: Mapped[str] = mapped_column(String(3), default="INR")

    # Contact person
    contact_name: Mapped[str | None] = mapped_column(String(100), default=None)
    contact_email: Mapped[str | None] = mapped_column(String(255), default=None)
    contact_phone: Mapped[str | None] = mapped_column(String(20), default=None)

    image: Mapped[str] = mapped_column(String(1024), default="default-event.jpg")
    created_by: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, start_date={self.start_date})>"
