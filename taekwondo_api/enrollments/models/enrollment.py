import secrets
import string
import uuid
from datetime import UTC, date, datetime

from sqlalchemy import ForeignKey, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from taekwondo_api.core.constants import REFERENCE_NUMBER_LENGTH
from taekwondo_api.db.session import Base

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def generate_reference_number() -> str:
    return "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(REFERENCE_NUMBER_LENGTH))


class Enrollment(Base):
    """A class enrollment application awaiting (or past) admin review."""

    __tablename__ = "enrollments"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    full_name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str] = mapped_column(String(20))
    date_of_birth: Mapped[date] = mapped_column()
    gender: Mapped[str] = mapped_column(String(20))
    address: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str] = mapped_column(String(100), default="Maharashtra")
    pincode: Mapped[str] = mapped_column(String(10))
    emergency_contact: Mapped[str] = mapped_column(String(100))
    emergency_phone: Mapped[str] = mapped_column(String(20))

    program: Mapped[str] = mapped_column(String(20))
    experience: Mapped[str] = mapped_column(String(20))
    medical_conditions: Mapped[str | None] = mapped_column(Text, default=None)
    how_did_you_hear: Mapped[str] = mapped_column(String(20))

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    reference_number: Mapped[str] = mapped_column(
        String(REFERENCE_NUMBER_LENGTH), unique=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    applicant = relationship("User", lazy="raise")

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id}, reference={self.reference_number}, status={self.status})>"
        )


@event.listens_for(Enrollment, "before_insert")
def _assign_reference_number(mapper: object, connection: object, target: Enrollment) -> None:
    if not target.reference_number:
        target.reference_number = generate_reference_number()
