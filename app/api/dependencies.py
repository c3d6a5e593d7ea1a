"""
Common dependencies for API endpoints.

Query parameter models used with FastAPI's Depends(), plus the router-level
guards applied to every public route (blocked IP rejection and visit tracking).
"""

from typing import Annotated, Literal

from fastapi import Depends, HTTPException, Request, status
from pydantic import BaseModel, Field, computed_field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import get_client_ip, get_user_agent
from app.core.database import get_db
from app.core.logging import get_logger
from app.services.blocklist import BlockListStore
from app.services.tracker import record_visit

logger = get_logger(__name__)


class PaginationParams(BaseModel):
    """Common pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number")
    per_page: int = Field(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def offset(self) -> int:
        """Calculate offset from page and per_page."""
        return (self.page - 1) * self.per_page


class PostSortParams(BaseModel):
    """Sort order for post listings (by post number)."""

    sort: Literal["oldest", "newest"] = Field(default="newest", description="Sort order")


async def reject_blocked_ip(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """
    Refuse requests from addresses on the block list.

    Raises:
        HTTPException: 403 if the client IP is blocked
    """
    ip = get_client_ip(request)
    if await BlockListStore(db).contains(ip):
        logger.info("blocked_ip_rejected", ip=ip, path=request.url.path)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


def route_template(request: Request) -> str:
    """
    Full path template of the matched route, e.g. /api/v1/posts/{post_id}.

    Newer Starlette versions report the router-local template for routes
    included under a prefix, so the API prefix is added back when missing.
    Falls back to the concrete path when no route matched.
    """
    template = getattr(request.scope.get("route"), "path", None)
    if template is None:
        return request.url.path
    if not template.startswith(settings.API_V1_STR):
        template = settings.API_V1_STR + template
    return template


async def track_visit(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """
    Record the request in the visitor tracker.

    The row is written with the request's own session, so it is committed
    along with the request and dropped if the request fails. Tracking
    failures never fail the request.
    """
    if not settings.TRACKER_ENABLED:
        return

    path = request.url.path
    if any(path.startswith(prefix) for prefix in settings.TRACKER_SKIP_PATHS):
        return

    route_path = route_template(request)

    try:
        await record_visit(db, get_client_ip(request), route_path, get_user_agent(request))
    except SQLAlchemyError:
        logger.warning("tracker_record_failed", path=path, exc_info=True)
