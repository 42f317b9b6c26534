import uuid
from datetime import date

from pydantic import BaseModel, Field

from taekwondo_api.core.constants import BeltRank, Role
from taekwondo_api.core.datetime_utils import UTCDatetime


class UserResponse(BaseModel):
    """Public view of an account. Password hash and reset grant are never part of it."""

    id: uuid.UUID
    name: str
    email: str
    role: str
    belt_rank: str
    phone_number: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    dob: date | None = None
    photo_url: str | None = None
    has_password: bool = False
    member_since: UTCDatetime | None = None
    created_at: UTCDatetime | None = None
    last_login: UTCDatetime | None = None

    class Config:
        from_attributes = True


class ProfileUpdateRequest(BaseModel):
    """Fields a user may edit on their own profile"""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    phone_number: str | None = Field(default=None, max_length=20)
    belt_rank: BeltRank | None = None
    street: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)
    dob: date | None = None
    photo_url: str | None = Field(default=None, max_length=1024)


class RoleUpdateRequest(BaseModel):
    role: Role
