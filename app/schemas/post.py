"""
Pydantic schemas for Post endpoints
"""

from pydantic import BaseModel, Field

from app.models.post import PostBase
from app.schemas.base import UTCDatetime
from app.schemas.review import ReviewResponse


class PostCreate(BaseModel):
    """Schema for creating a post (admin only)"""

    title: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1)
    img: str | None = Field(default=None, max_length=500)
    num: int | None = Field(
        default=None, ge=0, description="Post number (defaults to the highest existing + 1)"
    )


class PostUpdate(BaseModel):
    """Schema for updating a post. Omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    body: str | None = Field(default=None, min_length=1)
    img: str | None = Field(default=None, max_length=500)
    num: int | None = Field(default=None, ge=0)


class PostResponse(PostBase):
    """Schema for post response, without reviews"""

    post_id: int
    created_at: UTCDatetime


class PostDetailResponse(PostResponse):
    """A single post with its visible reviews in publication order"""

    reviews: list[ReviewResponse]


class PostListResponse(BaseModel):
    """Schema for post list"""

    total: int
    sort: str
    posts: list[PostResponse]
