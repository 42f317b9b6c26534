import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, model_validator

from taekwondo_api.core.constants import AgeGroup, EligibleBelt, EventType
from taekwondo_api.core.datetime_utils import UTCDatetime


class EventBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    event_type: EventType

    address: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    venue_details: str | None = None

    start_date: datetime
    end_date: datetime
    start_time: str | None = Field(None, max_length=10)
    end_time: str | None = Field(None, max_length=10)

    belt_ranks: list[EligibleBelt] = Field(default_factory=list)
    age_groups: list[AgeGroup] = Field(default_factory=list)

    is_registration_required: bool = True
    registration_link: str | None = Field(None, max_length=1024)
    registration_deadline: datetime | None = None
    fee_amount: float | None = Field(None, ge=0)
    fee_currency: str = Field("INR", min_length=3, max_length=3)

    contact_name: str | None = Field(None, max_length=100)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=20)

    image: str = Field("default-event.jpg", max_length=1024)


class EventCreate(EventBase):
    @model_validator(mode="after")
    def _check_dates(self) -> "EventCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, min_length=1, max_length=2000)
    event_type: EventType | None = None

    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=100)
    state: str | None = Field(None, min_length=1, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, min_length=1, max_length=100)
    venue_details: str | None = None

    start_date: datetime | None = None
    end_date: datetime | None = None
    start_time: str | None = Field(None, max_length=10)
    end_time: str | None = Field(None, max_length=10)

    belt_ranks: list[EligibleBelt] | None = None
    age_groups: list[AgeGroup] | None = None

    is_registration_required: bool | None = None
    registration_link: str | None = Field(None, max_length=1024)
    registration_deadline: datetime | None = None
    fee_amount: float | None = Field(None, ge=0)
    fee_currency: str | None = Field(None, min_length=3, max_length=3)

    contact_name: str | None = Field(None, max_length=100)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=20)

    image: str | None = Field(None, max_length=1024)


class EventResponse(EventBase):
    id: uuid.UUID
    start_date: UTCDatetime
    end_date: UTCDatetime
    registration_deadline: UTCDatetime | None = None
    belt_ranks: list[str] = Field(default_factory=list)
    age_groups: list[str] = Field(default_factory=list)
    contact_email: str | None = None
    created_by: uuid.UUID
    created_at: UTCDatetime

    class Config:
        from_attributes = True
