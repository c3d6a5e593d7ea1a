"""
Shared/common Pydantic schemas used across multiple endpoints
"""

from pydantic import BaseModel


class UserSummary(BaseModel):
    """
    Minimal user information for embedding in responses.

    Used for review authors so clients get a name without fetching the
    full user record.
    """

    user_id: int
    username: str

    # Allow Pydantic to read from SQLModel attributes (not just dicts)
    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
