"""
Utility functions
"""

from app.utils.dates import utc_now
from app.utils.sanitize import sanitize_content, strip_invisible

__all__ = [
    "sanitize_content",
    "strip_invisible",
    "utc_now",
]
