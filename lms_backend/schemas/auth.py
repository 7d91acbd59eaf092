"""Authentication schemas."""
import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic.networks import validate_email

from .common import BaseSchema, SuccessResponse


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _fold_email(value):
    """Trim and lowercase; anything that is not a string is left for type validation."""
    value = _blank_to_none(value)
    if not isinstance(value, str):
        return value
    return value.strip().lower()


def _normalize_email(value):
    value = _fold_email(value)
    if not isinstance(value, str):
        return value
    _, email = validate_email(value)
    return email.lower()


class RegisterRequest(BaseSchema):
    """Registration body. Presence of required fields is checked by the service."""

    first_name: Optional[str] = Field(None, description="First name")
    last_name: Optional[str] = Field(None, description="Last name")
    email: Optional[str] = Field(None, description="Email address")
    password: Optional[str] = Field(None, description="Password")
    role: Literal["admin", "user"] = Field(default="user", description="User role")
    gender: Optional[Literal["Male", "Female"]] = Field(None, description="Gender")
    location: Optional[str] = Field(None, description="Location")
    phone_number: Optional[str] = Field(None, description="Phone number")

    @field_validator("first_name", "last_name", "location", "phone_number", mode="before")
    @classmethod
    def strip_text(cls, value):
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def blank_password(cls, value):
        return _blank_to_none(value)


class SignInRequest(BaseSchema):
    """Sign-in body."""

    email: Optional[str] = Field(None, description="Email address")
    password: Optional[str] = Field(None, description="Password")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _fold_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def blank_password(cls, value):
        return _blank_to_none(value)


class ForgotPasswordRequest(BaseSchema):
    """Forgot-password body."""

    email: Optional[str] = Field(None, description="Email address")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _fold_email(value)


class ResetPasswordRequest(BaseSchema):
    """Reset-password body."""

    reset_token: Optional[str] = Field(None, description="Token from the reset email")
    new_password: Optional[str] = Field(None, description="New password")

    @field_validator("reset_token", "new_password", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class ChangePasswordRequest(BaseSchema):
    """Change-password body."""

    old_password: Optional[str] = Field(None, description="Current password")
    new_password: Optional[str] = Field(None, description="New password")

    @field_validator("old_password", "new_password", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class UserResponse(BaseSchema):
    """User as returned to clients; never carries the password hash."""

    id: uuid.UUID = Field(..., description="User ID")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email: str = Field(..., description="Email address")
    role: str = Field(..., description="User role")
    user_image: Optional[str] = Field(None, description="Avatar URL")
    gender: Optional[str] = Field(None, description="Gender")
    location: Optional[str] = Field(None, description="Location")
    phone_number: Optional[str] = Field(None, description="Phone number")
    has_chosen_path: bool = Field(False, description="Enrolled in a course or workshop")
    is_active: bool = Field(True, description="User active status")
    created_at: Optional[datetime] = Field(None, description="Account creation time")


class TokenPayload(BaseSchema):
    """Claims carried by an access token."""

    sub: uuid.UUID
    email: str
    role: str
    token_version: int
    type: str = "access"
    exp: int
    iat: Optional[int] = None


class UserEnvelope(SuccessResponse):
    """Envelope carrying a user."""

    user: UserResponse


class SignInResponse(UserEnvelope):
    """Sign-in envelope; the token is also set as a cookie."""

    token: str = Field(..., description="JWT access token")
    expires_in: int = Field(..., description="Token lifetime in seconds")
