"""
SQLModel-based Review models with inheritance for security

This module defines the Reviews database model using SQLModel, which combines
SQLAlchemy and Pydantic functionality. The inheritance structure is:

ReviewBase (shared public fields)
    ├─> Reviews (database table, adds moderation and origin fields)
    └─> ReviewResponse/AdminReviewResponse (API schemas, defined in app/schemas)

The stored body is always the sanitized text, never the raw submission.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class ReviewBase(SQLModel):
    """
    Base model with shared public fields for Reviews.
    """

    post_id: int
    body: str


class Reviews(ReviewBase, table=True):
    """
    Database table for reviews with moderation fields.

    Internal fields (should NOT be exposed via public API):
    - is_flagged, flag_reason, spam_score: Moderation state
    - ip_address, user_agent: Privacy-sensitive origin data
    """

    __tablename__ = "reviews"

    __table_args__ = (
        ForeignKeyConstraint(
            ["post_id"],
            ["posts.post_id"],
            ondelete="CASCADE",
            name="fk_reviews_post_id",
        ),
        ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            name="fk_reviews_user_id",
        ),
        Index("idx_reviews_post_id", "post_id"),
        Index("idx_reviews_is_flagged", "is_flagged"),
    )

    review_id: int | None = Field(default=None, primary_key=True)

    # Author (the anonymous sentinel account when submitted without login)
    user_id: int

    # Moderation
    is_flagged: bool = Field(default=False)
    flag_reason: str | None = Field(default=None)
    spam_score: int = Field(default=0)

    # Origin
    ip_address: str | None = Field(default=None, max_length=45)
    user_agent: str | None = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=False))
