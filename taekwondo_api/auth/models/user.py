import uuid
from datetime import UTC, date, datetime

from sqlalchemy import String, event, inspect
from sqlalchemy.orm import Mapped, mapped_column, validates

from taekwondo_api.core import security
from taekwondo_api.db.session import Base


class User(Base):
    """
    User model for authentication and authorization.

    Attributes:
        id: Unique UUID primary key
        email: Unique email address, stored trimmed and lowercased
        password: Argon2 hash. Plaintext assigned here is hashed on flush;
            None for accounts created through Google sign-in
        name: User's display name
        role: "user", "instructor" or "admin"
        google_id: Google account subject, unique when present
        reset_password_token: SHA-256 digest of the emailed reset secret
        reset_password_expire: Expiry instant of the reset secret
        last_login: Timestamp of the last successful password login
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    name: Mapped[str] = mapped_column(String(50))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str | None] = mapped_column(String(255), default=None)

    role: Mapped[str] = mapped_column(String(20), default="user")
    belt_rank: Mapped[str] = mapped_column(String(20), default="white")
    phone_number: Mapped[str | None] = mapped_column(String(20), default=None)

    street: Mapped[str | None] = mapped_column(String(255), default=None)
    city: Mapped[str | None] = mapped_column(String(100), default=None)
    state: Mapped[str | None] = mapped_column(String(100), default=None)
    zip_code: Mapped[str | None] = mapped_column(String(20), default=None)
    country: Mapped[str | None] = mapped_column(String(100), default=None)
    dob: Mapped[date | None] = mapped_column(default=None)

    # Google sign-in
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True, default=None)
    photo_url: Mapped[str | None] = mapped_column(String(1024), default=None)

    # Password reset grant
    reset_password_token: Mapped[str | None] = mapped_column(String(64), index=True, default=None)
    reset_password_expire: Mapped[datetime | None] = mapped_column(default=None)

    member_since: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    last_login: Mapped[datetime | None] = mapped_column(default=None)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    def match_password(self, candidate: str) -> bool:
        """Check a plaintext candidate against the stored hash.

        Accounts without a password (Google-only) never match.
        """
        return security.verify_password(candidate, self.password)

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def _hash_password_on_write(mapper: object, connection: object, target: User) -> None:
    # Only a freshly assigned value is plaintext. A replayed insert still
    # carries the hash from the failed flush, so hashes are never rehashed.
    history = inspect(target).attrs.password.history
    if history.added and target.password and not security.is_password_hash(target.password):
        target.password = security.get_password_hash(target.password)
