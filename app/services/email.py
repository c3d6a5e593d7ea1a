"""Email sending service with SMTP."""

import asyncio
import json
from email.message import EmailMessage

import aiosmtplib
from aiosmtplib.errors import (
    SMTPAuthenticationError,
    SMTPConnectError,
    SMTPConnectTimeoutError,
    SMTPException,
    SMTPReadTimeoutError,
)

from app.config import settings
from app.core.logging import get_logger
from app.models.post import Posts
from app.models.review import Reviews
from app.models.user import Users
from app.services.geoip import GeoInfo
from app.services.moderation import ModerationResult

logger = get_logger(__name__)


async def send_email(
    to: str | list[str],
    subject: str,
    body: str,
    html: str | None = None,
) -> bool:
    """
    Send email via SMTP with retry logic.

    Args:
        to: Recipient email address(es)
        subject: Email subject
        body: Plain text email body
        html: Optional HTML email body

    Returns:
        True if email sent successfully, False otherwise

    Note:
        This function logs errors but does NOT raise exceptions.
        Callers should check return value if they need to know success/failure.
    """
    if not settings.SMTP_HOST:
        logger.info("email_skipped_smtp_not_configured", to=to, subject=subject)
        return False

    message = EmailMessage()
    message["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    message["To"] = to if isinstance(to, str) else ", ".join(to)
    message["Subject"] = subject
    message.set_content(body)

    if html:
        message.add_alternative(html, subtype="html")

    # Only retry connection failures where we know the email wasn't queued
    max_retries = 3
    for attempt in range(max_retries):
        try:
            await aiosmtplib.send(
                message,
                hostname=settings.SMTP_HOST,
                port=settings.SMTP_PORT,
                username=settings.SMTP_USER or None,
                password=settings.SMTP_PASSWORD or None,
                use_tls=settings.SMTP_TLS,
                start_tls=settings.SMTP_STARTTLS,
                timeout=30,
            )
            logger.info("email_sent_success", to=to, subject=subject, attempt=attempt + 1)
            return True

        except SMTPReadTimeoutError as e:
            # Never retry: the message might already be queued on the server
            logger.error(
                "email_send_timeout_after_data",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        except SMTPAuthenticationError as e:
            logger.error(
                "email_auth_failed",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        except (SMTPConnectError, SMTPConnectTimeoutError) as e:
            # Connection never established, no data sent
            logger.warning(
                "email_connection_failed",
                to=to,
                subject=subject,
                attempt=attempt + 1,
                error=str(e),
                error_type=type(e).__name__,
            )
            if attempt < max_retries - 1:
                # Exponential backoff: 1s, 2s
                await asyncio.sleep(2**attempt)
            else:
                logger.error(
                    "email_connection_failed_all_retries",
                    to=to,
                    subject=subject,
                    error=str(e),
                )
                return False

        except SMTPException as e:
            logger.error(
                "email_smtp_error",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        except Exception as e:
            logger.error(
                "email_send_unexpected_error",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    return False


def _origin_lines(geo: GeoInfo) -> str:
    return f"IP Address: {geo.ip}\nCountry: {geo.country_name}\nCity: {geo.city_name}"


async def send_spam_flagged_email(
    result: ModerationResult,
    author_name: str,
    geo: GeoInfo,
) -> bool:
    """
    Tell the site admin that a review was held for moderation.

    Args:
        result: Moderation outcome, including the original text and matches
        author_name: Username of the submitter ("anonymous" when logged out)
        geo: Origin address with resolved country and city

    Returns:
        True if email sent successfully, False otherwise
    """
    subject = "Spam Review Flagged for Admin Review"
    body = f"""Hey,

A spam review has been flagged with the following details:

Original Content: {result.original_body}

Spam Score: {result.score}
Reasons: {", ".join(result.reasons)}

By: {author_name}

{_origin_lines(geo)}

Spam Details: {json.dumps(result.category_matches, indent=2)}
"""

    return await send_email(to=settings.ADMIN_EMAIL, subject=subject, body=body)


async def send_review_removed_email(
    author: Users,
    review: Reviews,
    post_title: str,
    reason: str | None,
) -> bool:
    """
    Tell a review's author that an administrator removed it.

    Returns:
        True if email sent successfully, False otherwise
    """
    subject = "Your review has been removed"
    body = f"""Hello {author.username},

Your review on the post "{post_title}" has been removed by an administrator.

Review content: "{review.body}"

Reason for removal: {reason or "No specific reason provided"}

If you have any questions, please contact us.

Thank you,
The Admin Team
"""

    return await send_email(to=author.email, subject=subject, body=body)


async def send_review_deleted_email(
    post: Posts,
    review: Reviews,
    username: str,
    geo: GeoInfo,
) -> bool:
    """
    Tell the site admin that an author deleted their own review.

    Returns:
        True if email sent successfully, False otherwise
    """
    subject = f"Review deleted on {settings.SITE_NAME}"
    body = f"""Hello,

A review has been deleted on "{post.title}"

Reading: {review.body}

By: {username}

{_origin_lines(geo)}
"""

    return await send_email(to=settings.ADMIN_EMAIL, subject=subject, body=body)


async def send_password_reset_email(user: Users, token: str) -> bool:
    """
    Send password reset link to user.

    Args:
        user: User object
        token: Raw reset token (not hashed)

    Returns:
        True if email sent successfully, False otherwise
    """
    reset_url = f"{settings.FRONTEND_URL}/reset-password?token={token}"
    hours = settings.PASSWORD_RESET_EXPIRE_HOURS

    subject = "Password Reset"
    body = f"""Hi {user.username},

You are receiving this because you (or someone else) have requested the reset of the password for your account on {settings.SITE_NAME}.

Please click on the following link, or paste it into your browser to complete the process:

{reset_url}

This link will expire in {hours} hour{"" if hours == 1 else "s"}.

If you did not request this, please ignore this email and your password will remain unchanged.
"""

    return await send_email(to=user.email, subject=subject, body=body)


async def send_password_changed_email(user: Users) -> bool:
    """
    Confirm to a user that their password was reset.

    Returns:
        True if email sent successfully, False otherwise
    """
    subject = "Your password has been changed"
    body = f"""Hello {user.username},

This is a confirmation that the password for your account on {settings.SITE_NAME} has just been changed.

If you did not make this change, please contact us straight away.
"""

    return await send_email(to=user.email, subject=subject, body=body)


async def send_details_updated_email(user: Users, old_email: str | None = None) -> bool:
    """
    Send the new account details to the user.

    The new address always gets the message. When the email changed, the old
    address gets a copy so the owner notices a change they did not make.

    Args:
        user: User with the updated details already applied
        old_email: Previous address, only when it differs from user.email

    Returns:
        True if every message was sent, False otherwise
    """
    subject = "Details Updated"
    body = f"""Hello {user.username},

The details for your account on {settings.SITE_NAME} have been updated:

Username: {user.username}
Email: {user.email}

If you did not make this change, please contact us straight away.
"""

    sent = await send_email(to=user.email, subject=subject, body=body)
    if old_email and old_email != user.email:
        sent = await send_email(to=old_email, subject=subject, body=body) and sent
    return sent


async def send_account_deleted_email(username: str, email: str) -> bool:
    """
    Confirm that an account has been deleted.

    Takes plain values since the user row is already gone when this is sent.

    Returns:
        True if email sent successfully, False otherwise
    """
    subject = "Account deleted"
    body = f"""Hello {username},

This is to confirm that your account on {settings.SITE_NAME} has been deleted, along with all of your reviews.
"""

    return await send_email(to=email, subject=subject, body=body)
