"""
Review lifecycle service.

A review goes through these states:

    submitted -> accepted (visible on its post)
              -> held (flagged, invisible) -> approved (visible) | deleted

A review is visible exactly when it has a PostReviews row, and it has one
exactly when is_flagged is False. Every function here that changes a review
commits the review and its link row together.
"""

from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import ReviewDisposition, settings
from app.core.logging import get_logger
from app.models.post import PostReviews, Posts
from app.models.review import Reviews
from app.models.user import Users
from app.services.blocklist import BlockListStore
from app.services.email import (
    send_review_deleted_email,
    send_review_removed_email,
    send_spam_flagged_email,
)
from app.services.geoip import GeoInfo
from app.services.moderation import ModerationResult, moderate_review

logger = get_logger(__name__)


@dataclass
class ReviewSubmission:
    """A review as it arrives from the client, before moderation."""

    body: str
    ip_address: str
    user_agent: str | None = None
    author: Users | None = None
    geo: GeoInfo | None = None

    @property
    def author_id(self) -> int:
        if self.author is None or self.author.user_id is None:
            return settings.ANONYMOUS_USER_ID
        return self.author.user_id

    @property
    def author_name(self) -> str:
        return self.author.username if self.author else settings.ANONYMOUS_USERNAME


async def _get_post_or_404(db: AsyncSession, post_id: int) -> Posts:
    post = await db.get(Posts, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


async def _remove_review(db: AsyncSession, review: Reviews) -> None:
    """Delete a review and its link row (if any). Caller commits."""
    await db.execute(
        delete(PostReviews).where(PostReviews.review_id == review.review_id)  # type: ignore[arg-type]
    )
    await db.delete(review)


async def submit_review(
    db: AsyncSession,
    post_id: int,
    submission: ReviewSubmission,
    block_list: BlockListStore | None = None,
) -> tuple[Reviews, ModerationResult]:
    """
    Moderate and store a new review on a post.

    Accepted reviews are linked to the post in the same commit. Flagged and
    blocked reviews are stored flagged and unlinked; a blocked review also
    adds its origin IP to the block list. The admin is emailed about held
    reviews after the commit.

    Args:
        db: Database session
        post_id: Post the review belongs to
        submission: Raw review text and origin details
        block_list: Block list to add offending IPs to (defaults to one on db)

    Returns:
        Tuple of (stored review, moderation result)

    Raises:
        HTTPException: 404 if the post doesn't exist, 400 if the text is empty
    """
    post = await _get_post_or_404(db, post_id)

    if not submission.body or not submission.body.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Review body cannot be empty",
        )

    result = moderate_review(submission.body)

    if not result.sanitized_body.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Review body is empty once markup is removed",
        )

    review = Reviews(
        post_id=post_id,
        user_id=submission.author_id,
        body=result.sanitized_body,
        is_flagged=result.is_flagged,
        flag_reason=result.flag_reason,
        spam_score=result.score,
        ip_address=submission.ip_address,
        user_agent=submission.user_agent,
    )
    db.add(review)
    await db.flush()

    if not review.is_flagged:
        db.add(PostReviews(post_id=post_id, review_id=review.review_id))  # type: ignore[arg-type]

    if result.disposition == ReviewDisposition.BLOCK and submission.ip_address:
        block_list = block_list or BlockListStore(db)
        await block_list.add(submission.ip_address, reason=f"Spam score {result.score}")

    await db.commit()

    logger.info(
        "review_submitted",
        review_id=review.review_id,
        post_id=post.post_id,
        user_id=review.user_id,
        disposition=result.disposition.value,
        score=result.score,
    )

    if review.is_flagged:
        await send_spam_flagged_email(
            result,
            author_name=submission.author_name,
            geo=submission.geo or GeoInfo(ip=submission.ip_address),
        )

    return review, result


async def approve_review(db: AsyncSession, review_id: int) -> Reviews:
    """
    Approve a held review and publish it on its post.

    Raises:
        HTTPException: 404 if the review doesn't exist, is not flagged, or its
            post no longer exists
    """
    review = await db.get(Reviews, review_id)
    if not review or not review.is_flagged:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Flagged review not found",
        )

    await _get_post_or_404(db, review.post_id)

    review.is_flagged = False
    review.flag_reason = None
    db.add(review)
    db.add(PostReviews(post_id=review.post_id, review_id=review_id))
    await db.commit()

    logger.info("review_approved", review_id=review_id, post_id=review.post_id)
    return review


async def delete_review_with_reason(
    db: AsyncSession, review_id: int, reason: str | None = None
) -> None:
    """
    Delete any review as an admin, telling its author why.

    The author is emailed after the commit unless the review was anonymous.

    Raises:
        HTTPException: 404 if the review doesn't exist
    """
    review = await db.get(Reviews, review_id)
    if not review:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")

    author = await db.get(Users, review.user_id)
    post = await db.get(Posts, review.post_id)

    await _remove_review(db, review)
    await db.commit()

    logger.info("review_deleted_by_admin", review_id=review_id, reason=reason)

    if author and author.user_id != settings.ANONYMOUS_USER_ID:
        await send_review_removed_email(
            author,
            review,
            post_title=post.title if post else "Unknown Post",
            reason=reason,
        )


async def delete_own_review(
    db: AsyncSession,
    post_id: int,
    review_id: int,
    user: Users,
    geo: GeoInfo,
) -> None:
    """
    Delete a review on behalf of its author, then notify the admin.

    Raises:
        HTTPException: 404 if the review doesn't exist on this post,
            403 if the user did not write it
    """
    review = await db.get(Reviews, review_id)
    if not review or review.post_id != post_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")

    if review.user_id != user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to do that",
        )

    post = await _get_post_or_404(db, post_id)

    await _remove_review(db, review)
    await db.commit()

    logger.info("review_deleted_by_author", review_id=review_id, post_id=post_id)

    await send_review_deleted_email(post, review, username=user.username, geo=geo)


async def delete_post_reviews(db: AsyncSession, post_id: int) -> int:
    """
    Delete every review (and link row) of a post. Caller commits.

    Returns:
        Number of reviews deleted
    """
    await db.execute(
        delete(PostReviews).where(PostReviews.post_id == post_id)  # type: ignore[arg-type]
    )
    result = await db.execute(
        delete(Reviews).where(Reviews.post_id == post_id)  # type: ignore[arg-type]
    )
    return result.rowcount or 0  # type: ignore[attr-defined]


async def delete_user_reviews(db: AsyncSession, user_id: int) -> int:
    """
    Delete every review written by a user, removing each from its post's
    visible list first. Caller commits.

    Returns:
        Number of reviews deleted
    """
    result = await db.execute(select(Reviews).where(Reviews.user_id == user_id))  # type: ignore[arg-type]
    reviews = result.scalars().all()
    for review in reviews:
        await _remove_review(db, review)
    return len(reviews)


async def get_visible_reviews(db: AsyncSession, post_id: int) -> list[Reviews]:
    """A post's visible reviews in the order they were published."""
    result = await db.execute(
        select(Reviews)
        .join(PostReviews, PostReviews.review_id == Reviews.review_id)  # type: ignore[arg-type]
        .where(PostReviews.post_id == post_id)  # type: ignore[arg-type]
        .order_by(PostReviews.link_id)  # type: ignore[arg-type]
    )
    return list(result.scalars().all())


async def list_reviews(
    db: AsyncSession,
    flagged: bool | None,
    offset: int,
    limit: int,
) -> tuple[list[Reviews], int]:
    """
    Reviews for the admin pages, newest first.

    Args:
        flagged: Only flagged (True), only unflagged (False) or all (None)

    Returns:
        Tuple of (page of reviews, total matching)
    """
    query = select(Reviews)
    if flagged is not None:
        query = query.where(Reviews.is_flagged == flagged)  # type: ignore[arg-type]

    total = await count_reviews(db, flagged)
    result = await db.execute(
        query.order_by(
            Reviews.created_at.desc(),  # type: ignore[attr-defined]
            Reviews.review_id.desc(),  # type: ignore[union-attr]
        )
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def count_reviews(db: AsyncSession, flagged: bool | None = None) -> int:
    query = select(func.count()).select_from(Reviews)
    if flagged is not None:
        query = query.where(Reviews.is_flagged == flagged)  # type: ignore[arg-type]
    return (await db.execute(query)).scalar_one()


async def get_users_by_id(db: AsyncSession, user_ids: list[int]) -> dict[int, Users]:
    """
    Fetch review authors in a single query.

    Users that no longer exist will not appear in the result.
    """
    if not user_ids:
        return {}
    result = await db.execute(
        select(Users).where(Users.user_id.in_(set(user_ids)))  # type: ignore[union-attr]
    )
    return {user.user_id: user for user in result.scalars().all()}  # type: ignore[misc]
