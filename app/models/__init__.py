"""
SQLModel table models - Database schema models.

All tables are registered on SQLModel.metadata when this package is imported,
which is what scripts/init_db.py and the test suite use to build the schema.
"""

from app.models.blocked_ip import BlockedIPs
from app.models.post import PostReviews, Posts
from app.models.review import Reviews
from app.models.tracker import Trackers
from app.models.user import Users

__all__ = [
    # Core entity models
    "Users",
    "Posts",
    "Reviews",
    # Junction/relationship tables
    "PostReviews",
    # Moderation and tracking
    "BlockedIPs",
    "Trackers",
]
