"""
Pydantic schemas for admin endpoints
"""

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.base import UTCDatetime
from app.schemas.post import PostResponse


class DashboardResponse(BaseModel):
    """Counts and recent posts for the admin dashboard"""

    post_count: int
    recent_posts: list[PostResponse]
    flagged_reviews_count: int
    all_reviews_count: int
    blocked_ips_count: int


class BlockIPRequest(BaseModel):
    """Request schema for adding or removing a blocked IP"""

    ip: str = Field(min_length=1, max_length=45)
    reason: str | None = Field(default=None, max_length=255)


class BlockedIPResponse(BaseModel):
    blocked_ip_id: int
    ip: str
    reason: str | None = None
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class BlockedIPListResponse(BaseModel):
    total: int
    blocked_ips: list[BlockedIPResponse]


class TrackerEntryResponse(BaseModel):
    """One tracked visitor"""

    tracker_id: int
    ip: str
    country: str
    city: str
    times_visited: int
    routes: dict[str, Any]
    user_agent: str | None = None
    is_first_visit: bool
    first_seen: UTCDatetime
    last_seen: UTCDatetime

    model_config = {"from_attributes": True}


class CountryStat(BaseModel):
    country: str
    visits: int
    unique_ips: int


class RouteStat(BaseModel):
    route: str
    hits: int


class TrackerStats(BaseModel):
    total_visits: int
    unique_ips: int
    blocked_ips: int
    countries: list[CountryStat]
    top_routes: list[RouteStat]


class TrackerResponse(BaseModel):
    """Tracker statistics plus a page of visitor rows"""

    stats: TrackerStats
    total: int
    page: int
    per_page: int
    entries: list[TrackerEntryResponse]
