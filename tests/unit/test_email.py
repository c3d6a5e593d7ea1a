"""Tests for the email service: retry logic and notification content."""

from unittest.mock import AsyncMock, patch

import pytest
from aiosmtplib.errors import (
    SMTPAuthenticationError,
    SMTPConnectError,
    SMTPDataError,
    SMTPReadTimeoutError,
)

from app.config import ReviewDisposition, settings
from app.models.post import Posts
from app.models.review import Reviews
from app.models.user import Users
from app.services.email import (
    send_account_deleted_email,
    send_details_updated_email,
    send_email,
    send_password_changed_email,
    send_password_reset_email,
    send_review_deleted_email,
    send_review_removed_email,
    send_spam_flagged_email,
)
from app.services.geoip import GeoInfo
from app.services.moderation import ModerationResult


@pytest.fixture
def smtp_configured():
    with patch.object(settings, "SMTP_HOST", "smtp.test"):
        yield


@pytest.mark.unit
@pytest.mark.usefixtures("smtp_configured")
class TestEmailRetryLogic:
    """Test email retry logic for different SMTP errors."""

    async def test_send_email_success(self):
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await send_email(to="test@example.com", subject="Test", body="Body")

            assert result is True
            assert mock_send.call_count == 1

    async def test_read_timeout_not_retried(self):
        """The message may already be queued, so a read timeout is never retried."""
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPReadTimeoutError("Timeout reading response")

            result = await send_email(to="test@example.com", subject="Test", body="Body")

            assert result is False
            assert mock_send.call_count == 1

    async def test_auth_error_not_retried(self):
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPAuthenticationError(535, "Authentication failed")

            result = await send_email(to="test@example.com", subject="Test", body="Body")

            assert result is False
            assert mock_send.call_count == 1

    async def test_connection_error_retried_three_times(self):
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch("app.services.email.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                mock_send.side_effect = SMTPConnectError("Cannot connect")

                result = await send_email(to="test@example.com", subject="Test", body="Body")

                assert result is False
                assert mock_send.call_count == 3
                assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    async def test_connection_error_then_success(self):
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch("app.services.email.asyncio.sleep", new_callable=AsyncMock):
                mock_send.side_effect = [SMTPConnectError("Cannot connect"), None]

                result = await send_email(to="test@example.com", subject="Test", body="Body")

                assert result is True
                assert mock_send.call_count == 2

    async def test_other_smtp_error_not_retried(self):
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPDataError(550, "Mailbox unavailable")

            result = await send_email(to="test@example.com", subject="Test", body="Body")

            assert result is False
            assert mock_send.call_count == 1

    async def test_unexpected_error_swallowed(self):
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = RuntimeError("boom")

            assert await send_email(to="test@example.com", subject="Test", body="Body") is False


@pytest.mark.unit
async def test_send_email_skipped_without_smtp_host():
    with patch.object(settings, "SMTP_HOST", None):
        with patch("app.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await send_email(to="test@example.com", subject="Test", body="Body")

    assert result is False
    mock_send.assert_not_called()


@pytest.mark.unit
class TestNotificationContent:
    """Notification emails carry the details an admin or author needs."""

    async def test_spam_flagged_email(self):
        result = ModerationResult(
            original_body="<b>buy now</b>",
            sanitized_body="buy now",
            score=4,
            disposition=ReviewDisposition.FLAG,
            reasons=["promotional: 1 matches", "Content too short"],
            category_matches={"promotional": ["buy"]},
        )
        geo = GeoInfo(ip="203.0.113.9", country_name="United Kingdom", city_name="Leeds")

        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            mock_send.return_value = True
            await send_spam_flagged_email(result, author_name="anonymous", geo=geo)

        kwargs = mock_send.call_args.kwargs
        assert kwargs["to"] == settings.ADMIN_EMAIL
        assert kwargs["subject"] == "Spam Review Flagged for Admin Review"
        body = kwargs["body"]
        assert "Original Content: <b>buy now</b>" in body
        assert "Spam Score: 4" in body
        assert "Reasons: promotional: 1 matches, Content too short" in body
        assert "By: anonymous" in body
        assert "IP Address: 203.0.113.9" in body
        assert "Country: United Kingdom" in body
        assert "City: Leeds" in body
        assert '"buy"' in body

    async def test_review_removed_email_default_reason(self):
        author = Users(user_id=3, username="testuser", email="test@example.com", password="x")
        review = Reviews(review_id=7, post_id=1, user_id=3, body="meh")

        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            await send_review_removed_email(author, review, post_title="Race day", reason=None)

        kwargs = mock_send.call_args.kwargs
        assert kwargs["to"] == "test@example.com"
        assert kwargs["subject"] == "Your review has been removed"
        assert 'on the post "Race day"' in kwargs["body"]
        assert 'Review content: "meh"' in kwargs["body"]
        assert "Reason for removal: No specific reason provided" in kwargs["body"]

    async def test_review_deleted_email(self):
        post = Posts(post_id=1, title="Race day", body="...", num=1)
        review = Reviews(review_id=7, post_id=1, user_id=3, body="changed my mind")

        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            await send_review_deleted_email(
                post, review, username="testuser", geo=GeoInfo(ip="198.51.100.1")
            )

        kwargs = mock_send.call_args.kwargs
        assert kwargs["to"] == settings.ADMIN_EMAIL
        assert kwargs["subject"] == f"Review deleted on {settings.SITE_NAME}"
        assert "Reading: changed my mind" in kwargs["body"]
        assert "By: testuser" in kwargs["body"]
        assert "Country: UNKNOWN" in kwargs["body"]


@pytest.mark.unit
class TestAccountEmails:
    """Emails sent by the account management endpoints."""

    async def test_password_reset_email_has_link(self):
        user = Users(user_id=3, username="testuser", email="test@example.com", password="x")

        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            mock_send.return_value = True
            result = await send_password_reset_email(user, "raw_token_abc")

        assert result is True
        kwargs = mock_send.call_args.kwargs
        assert kwargs["to"] == "test@example.com"
        assert f"{settings.FRONTEND_URL}/reset-password?token=raw_token_abc" in kwargs["body"]
        assert "1 hour." in kwargs["body"]

    async def test_password_changed_email(self):
        user = Users(user_id=3, username="testuser", email="test@example.com", password="x")

        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            await send_password_changed_email(user)

        kwargs = mock_send.call_args.kwargs
        assert kwargs["to"] == "test@example.com"
        assert kwargs["subject"] == "Your password has been changed"

    async def test_details_updated_sent_to_old_and_new_address(self):
        user = Users(user_id=3, username="renamed", email="new@example.com", password="x")

        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            mock_send.return_value = True
            result = await send_details_updated_email(user, old_email="old@example.com")

        assert result is True
        assert [c.kwargs["to"] for c in mock_send.call_args_list] == [
            "new@example.com",
            "old@example.com",
        ]
        assert "Username: renamed" in mock_send.call_args.kwargs["body"]
        assert "Email: new@example.com" in mock_send.call_args.kwargs["body"]

    async def test_details_updated_single_address(self):
        user = Users(user_id=3, username="renamed", email="same@example.com", password="x")

        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            await send_details_updated_email(user)

        assert mock_send.await_count == 1

    async def test_account_deleted_email(self):
        with patch("app.services.email.send_email", new_callable=AsyncMock) as mock_send:
            await send_account_deleted_email("testuser", "test@example.com")

        kwargs = mock_send.call_args.kwargs
        assert kwargs["to"] == "test@example.com"
        assert kwargs["subject"] == "Account deleted"
        assert "Hello testuser" in kwargs["body"]
