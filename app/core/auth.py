"""
Authentication dependencies for FastAPI route protection.

This module provides dependency functions for:
- Extracting and verifying JWT tokens from requests
- Loading current user from database
- Protecting routes with authentication requirements
"""

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.logging import set_user_context
from app.core.security import verify_access_token
from app.models.user import Users

optional_bearer = HTTPBearer(auto_error=False)


def _token_from_request(
    access_token: str | None, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    """The access_token cookie wins; an Authorization: Bearer header is the fallback."""
    if access_token:
        return access_token
    if credentials:
        return credentials.credentials
    return None


async def get_current_user_id(
    access_token: Annotated[str | None, Cookie()] = None,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer)] = None,
) -> int:
    """
    Extract and verify the JWT access token from cookie or Authorization header.

    Returns:
        User ID from valid token

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = _token_from_request(access_token, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = verify_access_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_id


async def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Users:
    """
    Load current user from database using verified token.

    Raises:
        HTTPException: 401 if user not found or inactive
    """
    result = await db.execute(select(Users).where(Users.user_id == user_id))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    set_user_context(user.user_id)
    return user


async def get_optional_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    access_token: Annotated[str | None, Cookie()] = None,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer)] = None,
) -> Users | None:
    """
    Get current user if authenticated, otherwise return None.

    Used by review submission, where logged out visitors post as the
    anonymous account.
    """
    token = _token_from_request(access_token, credentials)
    if not token:
        return None

    user_id = verify_access_token(token)
    if user_id is None:
        return None

    result = await db.execute(select(Users).where(Users.user_id == user_id))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()
    return user if user and user.active else None


async def require_admin(
    current_user: Annotated[Users, Depends(get_current_user)],
) -> Users:
    """
    Require current user to be an admin.

    Raises:
        HTTPException: 403 if user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    X-Forwarded-For is only honoured when the direct peer is one of
    settings.TRUSTED_PROXIES. The header is then read right to left and the
    first address that is not itself a trusted proxy is the client, so
    anything a client prepends to the header is ignored.
    """
    peer = request.client.host if request.client else None
    if peer is None:
        return "unknown"

    forwarded = request.headers.get("X-Forwarded-For")
    if not forwarded or peer not in settings.TRUSTED_PROXIES:
        return peer

    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in settings.TRUSTED_PROXIES:
            return hop
    # Every hop is a trusted proxy; the left-most one is closest to the client
    return hops[0] if hops else peer


def get_user_agent(request: Request) -> str:
    return request.headers.get("User-Agent", "unknown")[:255]


# Type aliases for dependency injection
CurrentUser = Annotated[Users, Depends(get_current_user)]
OptionalCurrentUser = Annotated[Users | None, Depends(get_optional_current_user)]
AdminUser = Annotated[Users, Depends(require_admin)]
