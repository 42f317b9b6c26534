import uuid
from datetime import date

from pydantic import BaseModel, EmailStr, Field

from taekwondo_api.core.constants import (
    EnrollmentStatus,
    Experience,
    Gender,
    Program,
    ReferralSource,
)
from taekwondo_api.core.datetime_utils import UTCDatetime


class EnrollmentCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    date_of_birth: date
    gender: Gender
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field("Maharashtra", min_length=1, max_length=100)
    pincode: str = Field(..., min_length=1, max_length=10)
    emergency_contact: str = Field(..., min_length=1, max_length=100)
    emergency_phone: str = Field(..., min_length=1, max_length=20)
    program: Program
    experience: Experience
    medical_conditions: str | None = None
    how_did_you_hear: ReferralSource


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus


class ApplicantSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str

    class Config:
        from_attributes = True


class EnrollmentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str
    email: str
    phone: str
    date_of_birth: date
    gender: str
    address: str
    city: str
    state: str
    pincode: str
    emergency_contact: str
    emergency_phone: str
    program: str
    experience: str
    medical_conditions: str | None = None
    how_did_you_hear: str
    status: str
    reference_number: str
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class EnrollmentWithApplicant(EnrollmentResponse):
    applicant: ApplicantSummary | None = None
