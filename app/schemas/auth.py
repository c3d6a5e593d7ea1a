"""
Authentication schemas for request/response validation.

This module defines Pydantic models for authentication-related API operations:
- Login credentials
- Token responses
- User registration
- Password reset and account management
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.core.security import validate_password_strength
from app.schemas.base import UTCDatetime, UTCDatetimeOptional


class LoginRequest(BaseModel):
    """Request schema for user login."""

    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=1, max_length=255)


class TokenResponse(BaseModel):
    """Response schema for successful authentication."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration time in seconds from now")


class UserRegisterRequest(BaseModel):
    """Request schema for user registration."""

    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=255)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password strength."""
        is_valid, error_message = validate_password_strength(v)
        if not is_valid:
            raise ValueError(error_message)
        return v


class ForgotPasswordRequest(BaseModel):
    """Request schema for forgot password."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request schema for password reset with token."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=255)
    confirm_password: str = Field(..., min_length=1, max_length=255)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        """Validate new password strength."""
        is_valid, error_message = validate_password_strength(v)
        if not is_valid:
            raise ValueError(error_message)
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UpdateDetailsRequest(BaseModel):
    """
    Request schema for changing username and/or email.

    current_password is required for any change.
    """

    username: str | None = Field(
        default=None, min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.-]+$"
    )
    email: EmailStr | None = None
    current_password: str = Field(..., min_length=1, max_length=255)

    @model_validator(mode="after")
    def has_changes(self) -> "UpdateDetailsRequest":
        if self.username is None and self.email is None:
            raise ValueError("Provide a new username or email")
        return self


class DeleteAccountRequest(BaseModel):
    """Request schema for deleting the logged in account."""

    password: str = Field(..., min_length=1, max_length=255)


class CurrentUserResponse(BaseModel):
    """The logged in user's own account details."""

    user_id: int
    username: str
    email: str
    role: str
    date_joined: UTCDatetime
    last_login: UTCDatetimeOptional = None

    model_config = {"from_attributes": True}
