"""Tests for password hashing, access tokens and reset tokens."""

from datetime import timedelta

import pytest

from app.core.security import (
    create_access_token,
    create_reset_token,
    get_password_hash,
    hash_reset_token,
    validate_password_strength,
    verify_access_token,
    verify_password,
)


@pytest.mark.unit
class TestPasswords:
    def test_hash_and_verify(self):
        hashed = get_password_hash("Str0ngPass")

        assert hashed != "Str0ngPass"
        assert verify_password("Str0ngPass", hashed)
        assert not verify_password("Wr0ngPass", hashed)

    def test_long_password_prehashed(self):
        """Passwords over bcrypt's 72 byte limit still differ past that limit."""
        base = "A1" + "x" * 80
        hashed = get_password_hash(base + "a")

        assert verify_password(base + "a", hashed)
        assert not verify_password(base + "b", hashed)

    def test_non_bcrypt_stored_value(self):
        assert verify_password("anything", "!") is False

    @pytest.mark.parametrize(
        ("password", "message"),
        [
            ("Sh0rt", "at least 8 characters"),
            ("lowercase1", "uppercase"),
            ("UPPERCASE1", "lowercase"),
            ("NoDigitsHere", "digit"),
        ],
    )
    def test_weak_passwords(self, password, message):
        is_valid, error = validate_password_strength(password)

        assert is_valid is False
        assert message in error

    def test_strong_password(self):
        assert validate_password_strength("Str0ngPass") == (True, None)


@pytest.mark.unit
class TestAccessTokens:
    def test_round_trip(self):
        assert verify_access_token(create_access_token(42)) == 42

    def test_expired(self):
        assert verify_access_token(create_access_token(42, timedelta(seconds=-1))) is None

    def test_garbage(self):
        assert verify_access_token("not-a-token") is None


@pytest.mark.unit
class TestResetTokens:
    def test_tokens_are_unique(self):
        assert create_reset_token() != create_reset_token()

    def test_hash_is_stable_sha256(self):
        token = create_reset_token()

        assert hash_reset_token(token) == hash_reset_token(token)
        assert len(hash_reset_token(token)) == 64
        assert hash_reset_token(token) != token
