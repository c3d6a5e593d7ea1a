"""Datetime helpers."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime.

    Timestamps are stored without tzinfo (MariaDB DATETIME and SQLite both drop it),
    so everything written to the database goes through this helper.
    """
    return datetime.now(UTC).replace(tzinfo=None)
