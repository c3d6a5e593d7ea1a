"""
Post API endpoints (public, read only).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import PostSortParams
from app.api.v1.reviews import build_review_responses
from app.core.database import get_db
from app.models.post import Posts
from app.schemas.post import PostDetailResponse, PostListResponse, PostResponse
from app.services.reviews import get_visible_reviews

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostListResponse)
async def list_posts(
    sorting: Annotated[PostSortParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PostListResponse:
    """
    List all posts ordered by post number.

    **Sorting:**
    - `newest` (default): highest post number first
    - `oldest`: lowest post number first
    """
    order = Posts.num.desc() if sorting.sort == "newest" else Posts.num.asc()  # type: ignore[attr-defined]
    result = await db.execute(select(Posts).order_by(order, Posts.post_id))  # type: ignore[arg-type]
    posts = result.scalars().all()

    total = (await db.execute(select(func.count()).select_from(Posts))).scalar_one()

    return PostListResponse(
        total=total,
        sort=sorting.sort,
        posts=[PostResponse.model_validate(post) for post in posts],
    )


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post(
    post_id: Annotated[int, Path(description="Post ID")],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PostDetailResponse:
    """
    Get a post with its visible reviews.

    Held (flagged) reviews are never included.
    """
    post = await db.get(Posts, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    reviews = await get_visible_reviews(db, post_id)
    return PostDetailResponse(
        **post.model_dump(),
        reviews=await build_review_responses(db, reviews),
    )
