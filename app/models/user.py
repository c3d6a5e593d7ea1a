"""
SQLModel-based User models with inheritance for security

This module defines the Users database model using SQLModel, which combines
SQLAlchemy and Pydantic functionality. The inheritance structure is:

UserBase (shared public fields)
    ├─> Users (database table, adds internal/sensitive fields)
    └─> UserSummary/UserResponse (API schemas, defined in app/schemas)

This approach eliminates field duplication while maintaining security boundaries.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.config import UserRole
from app.utils.dates import utc_now


class UserBase(SQLModel):
    """
    Base model with shared public fields for Users.

    These fields are safe to expose via the API.
    """

    username: str = Field(max_length=30, unique=True, index=True)


class Users(UserBase, table=True):
    """
    Database table for users with internal and sensitive fields.

    Internal/sensitive fields (should NOT be exposed via public API):
    - password: bcrypt hash
    - email: Privacy-sensitive
    - role, active: Access control

    One row (settings.ANONYMOUS_USER_ID) is a placeholder account that owns
    every review submitted without logging in. It has no usable password.
    """

    __tablename__ = "users"

    # Primary key
    user_id: int | None = Field(default=None, primary_key=True)

    # Authentication (highly sensitive - never expose)
    password: str = Field(max_length=255)

    # Contact info (privacy-sensitive)
    email: str = Field(max_length=120)

    # Access control
    role: str = Field(default=UserRole.USER, max_length=10)
    active: bool = Field(default=True)

    # Timestamps
    date_joined: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=False))
    last_login: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))

    # Password reset (SHA256 of the emailed token; cleared once used)
    password_reset_token: str | None = Field(default=None, max_length=64, index=True)
    password_reset_sent_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
    password_reset_expires_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=False)
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
