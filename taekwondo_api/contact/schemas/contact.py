import uuid

from pydantic import BaseModel, EmailStr, Field

from taekwondo_api.core.constants import ContactStatus, EnquiryType
from taekwondo_api.core.datetime_utils import UTCDatetime


class ContactMessageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=1000)
    phone: str | None = Field(None, max_length=20)
    enquiry_type: EnquiryType = "general"


class ContactStatusUpdate(BaseModel):
    status: ContactStatus


class ContactMessageResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    subject: str
    message: str
    phone: str | None = None
    enquiry_type: str
    status: str
    responded_by: uuid.UUID | None = None
    response_date: UTCDatetime | None = None
    created_at: UTCDatetime

    class Config:
        from_attributes = True
