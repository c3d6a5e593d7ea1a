"""
Authentication API endpoints.

This module provides endpoints for:
- User registration
- User login (JWT in an HTTPOnly cookie and in the response body)
- Logout
- Current user details
- Forgot/reset password via an emailed one-time token
- Changing username or email, and deleting the account
"""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import CurrentUser
from app.core.database import get_db
from app.core.logging import get_logger
from app.core.security import (
    create_access_token,
    create_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from app.models.user import Users
from app.schemas.auth import (
    CurrentUserResponse,
    DeleteAccountRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateDetailsRequest,
    UserRegisterRequest,
)
from app.schemas.common import MessageResponse
from app.services.email import (
    send_account_deleted_email,
    send_details_updated_email,
    send_password_changed_email,
    send_password_reset_email,
)
from app.services.reviews import delete_user_reviews
from app.utils.dates import utc_now

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_auth_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,  # Prevent JavaScript access (XSS protection)
        secure=settings.ENVIRONMENT == "production",  # HTTPS only in production
        samesite="strict",  # CSRF protection
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,  # Match JWT expiration
    )


def _clear_auth_cookie(response: Response) -> None:
    # Must match set_cookie params
    response.delete_cookie(
        key="access_token",
        path="/",
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="strict",
    )


def _token_response(response: Response, user: Users) -> TokenResponse:
    access_token = create_access_token(user.user_id)  # type: ignore[arg-type]
    _set_auth_cookie(response, access_token)
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserRegisterRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    Create an account and log it in.

    Usernames are unique regardless of case.
    """
    result = await db.execute(
        select(Users.user_id).where(func.lower(Users.username) == payload.username.lower())  # type: ignore[call-overload]
    )
    if result.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username is already taken",
        )

    user = Users(
        username=payload.username,
        email=payload.email,
        password=get_password_hash(payload.password),
        last_login=utc_now(),
    )
    db.add(user)
    await db.commit()

    logger.info("user_registered", user_id=user.user_id, username=user.username)
    return _token_response(response, user)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate user and return a JWT access token.

    The token is set as an HTTPOnly cookie and also returned in the body
    for clients that send it as a Bearer header.
    """
    result = await db.execute(select(Users).where(Users.username == credentials.username))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password):
        logger.info("login_failed", username=credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    user.last_login = utc_now()
    db.add(user)
    await db.commit()

    logger.info("login_success", user_id=user.user_id)
    return _token_response(response, user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """
    Clear the authentication cookie.

    Access tokens are stateless, so a copied token stays valid until it expires.
    """
    _clear_auth_cookie(response)
    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(current_user: CurrentUser) -> CurrentUserResponse:
    """Get current authenticated user information."""
    return CurrentUserResponse.model_validate(current_user)


FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email address exists, a password reset link has been sent."
)
INVALID_RESET_TOKEN = "Password reset token is invalid, has been used, or has expired"


async def _other_user_with(db: AsyncSession, column, value: str, user_id: int) -> bool:
    result = await db.execute(
        select(Users.user_id).where(func.lower(column) == value.lower(), Users.user_id != user_id)  # type: ignore[arg-type]
    )
    return result.first() is not None


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Email a one-time password reset link.

    The response is the same whether or not the address belongs to an
    account, so it cannot be used to discover registered emails.
    """
    result = await db.execute(
        select(Users)
        .where(func.lower(Users.email) == payload.email.lower())  # type: ignore[arg-type]
        .where(Users.user_id != settings.ANONYMOUS_USER_ID)  # type: ignore[arg-type]
        .where(Users.active == True)  # type: ignore[arg-type]  # noqa: E712
        .order_by(Users.user_id)  # type: ignore[arg-type]
        .limit(1)
    )
    user = result.scalar_one_or_none()

    if user is None:
        logger.info("password_reset_unknown_email")
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    token = create_reset_token()
    now = utc_now()
    user.password_reset_token = hash_reset_token(token)
    user.password_reset_sent_at = now
    user.password_reset_expires_at = now + timedelta(hours=settings.PASSWORD_RESET_EXPIRE_HOURS)
    db.add(user)
    await db.commit()

    logger.info("password_reset_requested", user_id=user.user_id)
    await send_password_reset_email(user, token)

    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=TokenResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    Set a new password using an emailed reset token, then log the user in.

    Tokens are single use: the stored hash is cleared on success.
    """
    result = await db.execute(
        select(Users).where(Users.password_reset_token == hash_reset_token(payload.token))  # type: ignore[arg-type]
    )
    user = result.scalar_one_or_none()

    if (
        not user
        or not user.active
        or user.password_reset_expires_at is None
        or user.password_reset_expires_at < utc_now()
    ):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_RESET_TOKEN)

    user.password = get_password_hash(payload.new_password)
    user.password_reset_token = None
    user.password_reset_sent_at = None
    user.password_reset_expires_at = None
    user.last_login = utc_now()
    db.add(user)
    await db.commit()

    logger.info("password_reset_completed", user_id=user.user_id)
    await send_password_changed_email(user)

    return _token_response(response, user)


@router.patch("/me", response_model=CurrentUserResponse)
async def update_details(
    payload: UpdateDetailsRequest,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CurrentUserResponse:
    """
    Change the logged in user's username and/or email.

    Requires the current password. The new details are mailed to the new
    address, and to the old one as well when the email changed.
    """
    if not verify_password(payload.current_password, current_user.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password incorrect, no details changed",
        )

    user_id: int = current_user.user_id  # type: ignore[assignment]

    if payload.username is not None and await _other_user_with(
        db, Users.username, payload.username, user_id
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Username is already taken"
        )

    if payload.email is not None and await _other_user_with(db, Users.email, payload.email, user_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Email is already registered"
        )

    old_email = current_user.email
    if payload.username is not None:
        current_user.username = payload.username
    if payload.email is not None:
        current_user.email = payload.email
    db.add(current_user)
    await db.commit()

    logger.info(
        "user_details_updated",
        user_id=user_id,
        username_changed=payload.username is not None,
        email_changed=current_user.email != old_email,
    )
    await send_details_updated_email(
        current_user, old_email=old_email if current_user.email != old_email else None
    )

    return CurrentUserResponse.model_validate(current_user)


@router.delete("/me", response_model=MessageResponse)
async def delete_account(
    payload: DeleteAccountRequest,
    response: Response,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Delete the logged in account and every review it wrote.

    Requires the password. The anonymous placeholder account cannot be deleted.
    """
    if current_user.user_id == settings.ANONYMOUS_USER_ID:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{current_user.username} cannot be deleted here",
        )

    if not verify_password(payload.password, current_user.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incorrect password, please try again",
        )

    user_id = current_user.user_id
    username, email = current_user.username, current_user.email

    reviews_deleted = await delete_user_reviews(db, user_id)  # type: ignore[arg-type]
    # Reviews reference the user row, so they must be gone first
    await db.flush()
    await db.delete(current_user)
    await db.commit()

    _clear_auth_cookie(response)
    logger.info("user_deleted", user_id=user_id, reviews_deleted=reviews_deleted)
    await send_account_deleted_email(username, email)

    return MessageResponse(message="Your account has been deleted")
