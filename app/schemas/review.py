"""
Pydantic schemas for Review endpoints
"""

from pydantic import BaseModel, Field

from app.config import ReviewDisposition
from app.schemas.base import UTCDatetime
from app.schemas.common import UserSummary


class ReviewCreate(BaseModel):
    """
    Schema for submitting a review.

    Markup is allowed in the request but stripped before storage.
    """

    body: str = Field(min_length=1, max_length=10000, description="Review text")


class ReviewResponse(BaseModel):
    """
    Public review data.

    Does NOT include moderation or origin fields (score, IP, user agent).
    """

    review_id: int
    post_id: int
    body: str
    created_at: UTCDatetime
    author: UserSummary


class ReviewSubmitResponse(BaseModel):
    """Result of a review submission"""

    review_id: int
    disposition: ReviewDisposition
    is_flagged: bool
    message: str


class AdminReviewResponse(ReviewResponse):
    """Review with moderation and origin fields for the admin pages"""

    is_flagged: bool
    flag_reason: str | None = None
    spam_score: int
    ip_address: str | None = None
    user_agent: str | None = None
    author_email: str | None = None
    post_title: str | None = None


class AdminReviewListResponse(BaseModel):
    """Schema for paginated admin review list"""

    total: int
    page: int
    per_page: int
    reviews: list[AdminReviewResponse]


class DeleteReviewRequest(BaseModel):
    """Optional reason sent to the author when an admin deletes a review"""

    reason: str | None = Field(default=None, max_length=1000)
