"""
Pydantic schemas for API responses and requests
"""

from app.models.post import PostBase  # Re-export from models
from app.models.user import UserBase  # Re-export from models
from app.schemas.admin import (
    BlockedIPListResponse,
    BlockedIPResponse,
    BlockIPRequest,
    DashboardResponse,
    TrackerResponse,
)
from app.schemas.common import MessageResponse, UserSummary
from app.schemas.post import (
    PostCreate,
    PostDetailResponse,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from app.schemas.review import (
    AdminReviewListResponse,
    AdminReviewResponse,
    DeleteReviewRequest,
    ReviewCreate,
    ReviewResponse,
    ReviewSubmitResponse,
)

__all__ = [
    # Shared
    "UserBase",
    "UserSummary",
    "MessageResponse",
    # Post schemas
    "PostBase",
    "PostCreate",
    "PostUpdate",
    "PostResponse",
    "PostDetailResponse",
    "PostListResponse",
    # Review schemas
    "ReviewCreate",
    "ReviewResponse",
    "ReviewSubmitResponse",
    "AdminReviewResponse",
    "AdminReviewListResponse",
    "DeleteReviewRequest",
    # Admin schemas
    "DashboardResponse",
    "BlockIPRequest",
    "BlockedIPResponse",
    "BlockedIPListResponse",
    "TrackerResponse",
]
