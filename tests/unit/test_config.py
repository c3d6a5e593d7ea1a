"""Tests for settings and config constants."""

import pytest

from app.config import ReviewDisposition, Settings, SpamPenalty, UserRole, settings


@pytest.mark.unit
class TestSettings:
    def test_moderation_defaults(self) -> None:
        assert settings.SPAM_FLAG_THRESHOLD == 3
        assert settings.SPAM_BLOCK_THRESHOLD == 10
        assert settings.REVIEW_RATE_LIMIT == 3
        assert settings.REVIEW_RATE_WINDOW_MINUTES == 15

    def test_cors_origins_parsed_from_comma_separated_string(self) -> None:
        s = Settings(
            SECRET_KEY="x",
            DATABASE_URL="sqlite+aiosqlite://",
            CORS_ORIGINS="http://a.example, http://b.example",
        )
        assert s.CORS_ORIGINS == ["http://a.example", "http://b.example"]

    def test_tracker_skip_paths_parsed(self) -> None:
        s = Settings(
            SECRET_KEY="x",
            DATABASE_URL="sqlite+aiosqlite://",
            TRACKER_SKIP_PATHS="/favicon.ico, /static/,",
        )
        assert s.TRACKER_SKIP_PATHS == ["/favicon.ico", "/static/"]

    def test_trusted_proxies_parsed(self) -> None:
        s = Settings(
            SECRET_KEY="x",
            DATABASE_URL="sqlite+aiosqlite://",
            TRUSTED_PROXIES="10.0.0.1, ::1,",
        )
        assert s.TRUSTED_PROXIES == ["10.0.0.1", "::1"]

    def test_trusted_proxies_default_to_loopback(self) -> None:
        assert settings.TRUSTED_PROXIES == ["127.0.0.1", "::1"]


@pytest.mark.unit
class TestConstants:
    def test_dispositions(self) -> None:
        assert [d.value for d in ReviewDisposition] == ["accept", "flag", "block"]

    def test_roles(self) -> None:
        assert UserRole.USER == "user"
        assert UserRole.ADMIN == "admin"

    def test_penalties(self) -> None:
        assert (SpamPenalty.MIN_LENGTH, SpamPenalty.SHORT_CONTENT) == (10, 2)
        assert (SpamPenalty.MAX_LENGTH, SpamPenalty.LONG_CONTENT) == (2000, 1)
        assert (SpamPenalty.CAPS_RATIO, SpamPenalty.EXCESSIVE_CAPS) == (0.5, 2)
