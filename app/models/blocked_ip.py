"""
Blocked IP address model.

Each row is one member of the IP block list. The unique constraint on ``ip``
is what makes adding an address idempotent.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class BlockedIPs(SQLModel, table=True):
    """
    Database table for blocked IP addresses.
    """

    __tablename__ = "blocked_ips"

    blocked_ip_id: int | None = Field(default=None, primary_key=True)
    ip: str = Field(max_length=45, unique=True, index=True)
    reason: str | None = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=False))
