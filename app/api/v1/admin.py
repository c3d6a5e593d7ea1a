"""
Admin API endpoints for the blog's moderation dashboard.

Every endpoint here requires an admin account and provides:
- Dashboard counts
- Post CRUD
- Review moderation (list, approve held reviews, delete with a reason)
- IP block list management
- Visitor tracker statistics
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import PaginationParams, PostSortParams
from app.api.v1.reviews import author_summary
from app.core.auth import AdminUser, require_admin
from app.core.database import get_db
from app.core.logging import get_logger
from app.models.post import Posts
from app.models.review import Reviews
from app.schemas.admin import (
    BlockedIPListResponse,
    BlockedIPResponse,
    BlockIPRequest,
    DashboardResponse,
    TrackerEntryResponse,
    TrackerResponse,
    TrackerStats,
)
from app.schemas.common import MessageResponse
from app.schemas.post import PostCreate, PostListResponse, PostResponse, PostUpdate
from app.schemas.review import (
    AdminReviewListResponse,
    AdminReviewResponse,
    DeleteReviewRequest,
)
from app.services.blocklist import BlockListStore
from app.services.reviews import (
    approve_review,
    count_reviews,
    delete_post_reviews,
    delete_review_with_reason,
    get_users_by_id,
    list_reviews,
)
from app.services.tracker import get_tracker_stats, list_tracker_entries

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

RECENT_POSTS_LIMIT = 5


async def _admin_review_responses(
    db: AsyncSession, reviews: list[Reviews]
) -> list[AdminReviewResponse]:
    users = await get_users_by_id(db, [r.user_id for r in reviews])

    post_ids = {r.post_id for r in reviews}
    titles: dict[int, str] = {}
    if post_ids:
        result = await db.execute(
            select(Posts.post_id, Posts.title).where(Posts.post_id.in_(post_ids))  # type: ignore[call-overload,union-attr]
        )
        titles = dict(result.fetchall())

    responses = []
    for review in reviews:
        author = users.get(review.user_id)
        responses.append(
            AdminReviewResponse(
                review_id=review.review_id,  # type: ignore[arg-type]
                post_id=review.post_id,
                body=review.body,
                created_at=review.created_at,
                author=author_summary(review.user_id, users),
                is_flagged=review.is_flagged,
                flag_reason=review.flag_reason,
                spam_score=review.spam_score,
                ip_address=review.ip_address,
                user_agent=review.user_agent,
                author_email=author.email if author else None,
                post_title=titles.get(review.post_id),
            )
        )
    return responses


# ===== Dashboard =====


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(db: Annotated[AsyncSession, Depends(get_db)]) -> DashboardResponse:
    """Counts for the admin landing page plus the most recently created posts."""
    post_count = (await db.execute(select(func.count()).select_from(Posts))).scalar_one()
    recent = await db.execute(
        select(Posts).order_by(desc(Posts.created_at), desc(Posts.post_id)).limit(RECENT_POSTS_LIMIT)  # type: ignore[arg-type]
    )

    return DashboardResponse(
        post_count=post_count,
        recent_posts=[PostResponse.model_validate(p) for p in recent.scalars().all()],
        flagged_reviews_count=await count_reviews(db, flagged=True),
        all_reviews_count=await count_reviews(db),
        blocked_ips_count=await BlockListStore(db).count(),
    )


# ===== Posts =====


@router.get("/posts", response_model=PostListResponse)
async def admin_list_posts(
    sorting: Annotated[PostSortParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PostListResponse:
    """All posts ordered by post number."""
    order = Posts.num.desc() if sorting.sort == "newest" else Posts.num.asc()  # type: ignore[attr-defined]
    result = await db.execute(select(Posts).order_by(order, Posts.post_id))  # type: ignore[arg-type]
    posts = result.scalars().all()
    return PostListResponse(
        total=len(posts),
        sort=sorting.sort,
        posts=[PostResponse.model_validate(p) for p in posts],
    )


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PostResponse:
    """
    Create a post.

    When `num` is omitted the post gets the next number after the highest
    existing one.
    """
    num = payload.num
    if num is None:
        highest = (await db.execute(select(func.max(Posts.num)))).scalar()
        num = (highest or 0) + 1

    post = Posts(title=payload.title, body=payload.body, img=payload.img, num=num)
    db.add(post)
    await db.commit()

    logger.info("post_created", post_id=post.post_id, num=num, admin_id=current_user.user_id)
    return PostResponse.model_validate(post)


@router.put("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: Annotated[int, Path(description="Post ID")],
    payload: PostUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PostResponse:
    """Update a post. Only the fields sent are changed."""
    post = await db.get(Posts, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(post, field, value)

    db.add(post)
    await db.commit()

    return PostResponse.model_validate(post)


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: Annotated[int, Path(description="Post ID")],
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Delete a post together with all of its reviews."""
    post = await db.get(Posts, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    deleted_reviews = await delete_post_reviews(db, post_id)
    await db.delete(post)
    await db.commit()

    logger.info(
        "post_deleted",
        post_id=post_id,
        deleted_reviews=deleted_reviews,
        admin_id=current_user.user_id,
    )
    return MessageResponse(message="Post deleted successfully!")


# ===== Reviews =====


@router.get("/reviews", response_model=AdminReviewListResponse)
async def admin_list_reviews(
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
    flagged: Annotated[
        bool | None, Query(description="Only flagged (true) or only published (false) reviews")
    ] = None,
) -> AdminReviewListResponse:
    """All reviews, newest first, with moderation details."""
    reviews, total = await list_reviews(db, flagged, pagination.offset, pagination.per_page)
    return AdminReviewListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        reviews=await _admin_review_responses(db, reviews),
    )


@router.get("/reviews/flagged", response_model=AdminReviewListResponse)
async def list_flagged_reviews(
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminReviewListResponse:
    """Reviews held for moderation, newest first."""
    reviews, total = await list_reviews(db, True, pagination.offset, pagination.per_page)
    return AdminReviewListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        reviews=await _admin_review_responses(db, reviews),
    )


@router.post("/reviews/{review_id}/approve", response_model=MessageResponse)
async def approve_flagged_review(
    review_id: Annotated[int, Path(description="Review ID")],
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Approve a held review and publish it on its post.

    Returns 404 for reviews that are not currently flagged, so approving
    twice fails the second time.
    """
    await approve_review(db, review_id)
    logger.info("admin_review_approved", review_id=review_id, admin_id=current_user.user_id)
    return MessageResponse(message="Review approved and added to post")


@router.post("/reviews/{review_id}/delete", response_model=MessageResponse)
async def delete_review(
    review_id: Annotated[int, Path(description="Review ID")],
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    payload: Annotated[DeleteReviewRequest | None, Body()] = None,
) -> MessageResponse:
    """
    Delete any review, held or published.

    The author is emailed the reason unless the review was anonymous.
    """
    reason = payload.reason if payload else None
    await delete_review_with_reason(db, review_id, reason)
    logger.info("admin_review_deleted", review_id=review_id, admin_id=current_user.user_id)
    return MessageResponse(message="Review deleted successfully")


# ===== Blocked IPs =====


@router.get("/blocked-ips", response_model=BlockedIPListResponse)
async def list_blocked_ips(db: Annotated[AsyncSession, Depends(get_db)]) -> BlockedIPListResponse:
    """All blocked IP addresses, most recent first."""
    blocked = await BlockListStore(db).list()
    return BlockedIPListResponse(
        total=len(blocked),
        blocked_ips=[BlockedIPResponse.model_validate(b) for b in blocked],
    )


@router.post("/blocked-ips", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def block_ip(
    payload: BlockIPRequest,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Add an IP address to the block list. Adding a blocked address again is a no-op."""
    added = await BlockListStore(db).add(payload.ip, reason=payload.reason)
    await db.commit()

    if not added:
        return MessageResponse(message=f"IP {payload.ip} is already blocked")

    logger.info("admin_ip_blocked", ip=payload.ip, admin_id=current_user.user_id)
    return MessageResponse(message=f"IP {payload.ip} has been blocked")


@router.delete("/blocked-ips/{ip}", response_model=MessageResponse)
async def unblock_ip(
    ip: Annotated[str, Path(description="IP address to unblock")],
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Remove an IP address from the block list."""
    removed = await BlockListStore(db).remove(ip)
    await db.commit()

    if not removed:
        return MessageResponse(message=f"IP {ip} was not blocked")

    logger.info("admin_ip_unblocked", ip=ip, admin_id=current_user.user_id)
    return MessageResponse(message=f"IP {ip} has been unblocked")


# ===== Tracker =====


@router.get("/tracker", response_model=TrackerResponse)
async def tracker(
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Query(ge=1, le=200, description="Items per page")] = 50,
) -> TrackerResponse:
    """Visitor statistics and tracked visitors, most recent visit first."""
    stats = await get_tracker_stats(db)
    entries, total = await list_tracker_entries(db, (page - 1) * per_page, per_page)

    return TrackerResponse(
        stats=TrackerStats.model_validate(stats),
        total=total,
        page=page,
        per_page=per_page,
        entries=[TrackerEntryResponse.model_validate(e) for e in entries],
    )
