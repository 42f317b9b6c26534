from pydantic import BaseModel, EmailStr, Field

from taekwondo_api.auth.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    """Self-registration. The role is not accepted here: new accounts are always "user"."""

    name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str
    phone_number: str | None = Field(default=None, max_length=20)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class GoogleAuthRequest(BaseModel):
    """ID token obtained by the frontend from Google sign-in.

    ``name`` and ``photo_url`` are used only when the verified token carries
    no profile claims of its own.
    """

    id_token: str = Field(min_length=1)
    name: str | None = Field(default=None, max_length=50)
    photo_url: str | None = None


class AuthPayload(BaseModel):
    """Token plus the account it was issued for"""

    token: str
    token_type: str = "bearer"
    user: UserResponse


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str
