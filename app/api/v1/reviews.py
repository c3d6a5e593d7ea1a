"""
Review API endpoints.

Submitting runs the moderation pipeline; the response says whether the
review went live or was held for an admin.
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import CurrentUser, OptionalCurrentUser, get_client_ip, get_user_agent
from app.core.database import get_db
from app.core.redis import get_redis
from app.models.review import Reviews
from app.models.user import Users
from app.schemas.common import MessageResponse, UserSummary
from app.schemas.review import ReviewCreate, ReviewResponse, ReviewSubmitResponse
from app.services.geoip import lookup_geo
from app.services.rate_limit import check_review_rate_limit, review_rate_key
from app.services.reviews import (
    ReviewSubmission,
    delete_own_review,
    get_users_by_id,
    submit_review,
)

router = APIRouter(prefix="/posts/{post_id}/reviews", tags=["reviews"])


def author_summary(user_id: int, users: dict[int, Users]) -> UserSummary:
    """Summary for a review author, tolerating deleted accounts."""
    user = users.get(user_id)
    if user:
        return UserSummary.model_validate(user)
    if user_id == settings.ANONYMOUS_USER_ID:
        return UserSummary(user_id=user_id, username=settings.ANONYMOUS_USERNAME)
    return UserSummary(user_id=user_id, username="[deleted]")


async def build_review_responses(db: AsyncSession, reviews: list[Reviews]) -> list[ReviewResponse]:
    """Public review payloads with authors loaded in one query."""
    users = await get_users_by_id(db, [r.user_id for r in reviews])
    return [
        ReviewResponse(
            review_id=review.review_id,  # type: ignore[arg-type]
            post_id=review.post_id,
            body=review.body,
            created_at=review.created_at,
            author=author_summary(review.user_id, users),
        )
        for review in reviews
    ]


@router.post("", response_model=ReviewSubmitResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate,
    request: Request,
    current_user: OptionalCurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    redis_client: Annotated[redis.Redis, Depends(get_redis)],  # type: ignore[type-arg]
    post_id: Annotated[int, Path(description="Post ID")],
) -> ReviewSubmitResponse:
    """
    Submit a review on a post.

    Logged in users post under their own name, everyone else as the
    anonymous account. Reviews that look like spam are stored but held for
    admin approval, and very high scores also block the sender's IP.

    Limited to 3 submissions per 15 minutes per user (or per IP when anonymous).
    """
    ip_address = get_client_ip(request)
    user_id = current_user.user_id if current_user else None
    await check_review_rate_limit(review_rate_key(user_id, ip_address), redis_client)

    submission = ReviewSubmission(
        body=payload.body,
        ip_address=ip_address,
        user_agent=get_user_agent(request),
        author=current_user,
        geo=await lookup_geo(ip_address),
    )
    review, result = await submit_review(db, post_id, submission)

    return ReviewSubmitResponse(
        review_id=review.review_id,  # type: ignore[arg-type]
        disposition=result.disposition,
        is_flagged=review.is_flagged,
        message=result.submitter_message,
    )


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    request: Request,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    post_id: Annotated[int, Path(description="Post ID")],
    review_id: Annotated[int, Path(description="Review ID")],
) -> MessageResponse:
    """
    Delete your own review.

    Only the author can delete a review here; admins use the admin endpoints.
    """
    geo = await lookup_geo(get_client_ip(request))
    await delete_own_review(db, post_id, review_id, current_user, geo)
    return MessageResponse(message="Successfully deleted review!")
