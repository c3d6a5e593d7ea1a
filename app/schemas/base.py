"""
Base schema types with UTC datetime serialization.

Timestamps are stored as naive UTC, so responses add the Z suffix explicitly.
"""

from datetime import datetime
from typing import Annotated

from pydantic import PlainSerializer


def _format_utc(dt: datetime | None) -> str | None:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ") if dt else None


# Usage: created_at: UTCDatetime instead of created_at: datetime
UTCDatetime = Annotated[datetime, PlainSerializer(_format_utc, return_type=str)]

# Optional version for nullable datetime fields
UTCDatetimeOptional = Annotated[
    datetime | None, PlainSerializer(_format_utc, return_type=str | None)
]
