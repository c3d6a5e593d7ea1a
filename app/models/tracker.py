"""
Visitor tracking model.

One row per client IP, with a running visit count and a JSON map of
route -> hit count.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class Trackers(SQLModel, table=True):
    """
    Database table for per-IP visit tracking.
    """

    __tablename__ = "trackers"

    tracker_id: int | None = Field(default=None, primary_key=True)
    ip: str = Field(max_length=45, unique=True, index=True)

    country: str = Field(default="UNKNOWN", max_length=100)
    city: str = Field(default="UNKNOWN", max_length=100)

    times_visited: int = Field(default=0)
    routes: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    user_agent: str | None = Field(default=None, max_length=255)
    is_first_visit: bool = Field(default=True)

    first_seen: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=False))
    last_seen: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=False))
