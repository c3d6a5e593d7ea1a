"""
SQLModel-based Post models with inheritance for security

This module defines the Posts and PostReviews database models. The inheritance
structure is:

PostBase (shared public fields)
    ├─> Posts (database table, adds primary key and timestamps)
    └─> PostCreate/PostUpdate/PostResponse (API schemas, defined in app/schemas)

Note: PostReviews is the post's visible review list. A review has a row here
exactly when it is not flagged, and link_id gives the display order.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKeyConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class PostBase(SQLModel):
    """
    Base model with shared public fields for Posts.

    These fields are safe to expose via the API and are shared between:
    - The database table (Posts)
    - API response schemas (PostResponse)
    - API request schemas (PostCreate)
    """

    title: str = Field(max_length=200)
    body: str
    img: str | None = Field(default=None, max_length=500)

    # Ordinal used for listing order (the blog's "Post #n")
    num: int = Field(index=True)


class Posts(PostBase, table=True):
    """
    Database table for blog posts.
    """

    __tablename__ = "posts"

    post_id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=False))


class PostReviews(SQLModel, table=True):
    """
    Ordered link between a post and its visible (accepted or approved) reviews.
    """

    __tablename__ = "post_reviews"

    __table_args__ = (
        UniqueConstraint("post_id", "review_id", name="uq_post_reviews_post_review"),
        ForeignKeyConstraint(
            ["post_id"],
            ["posts.post_id"],
            ondelete="CASCADE",
            name="fk_post_reviews_post_id",
        ),
        ForeignKeyConstraint(
            ["review_id"],
            ["reviews.review_id"],
            ondelete="CASCADE",
            name="fk_post_reviews_review_id",
        ),
    )

    link_id: int | None = Field(default=None, primary_key=True)
    post_id: int = Field(index=True)
    review_id: int = Field(index=True)
