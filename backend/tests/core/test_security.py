"""Tests for password hashing and identity tokens."""
from datetime import timedelta

import pytest
from jose import jwt

from core.config import Settings
from core.errors import AppError, ErrorKind
from core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    """Tests for the bcrypt password helpers."""

    def test__hash_password__is_not_plain_text(self) -> None:
        """Hashes never equal the password and are salted."""
        first = hash_password("secret123")
        second = hash_password("secret123")
        assert first != "secret123"
        assert first != second

    def test__verify_password__matches(self) -> None:
        """The original password verifies against its hash."""
        assert verify_password("secret123", hash_password("secret123")) is True

    def test__verify_password__rejects_wrong_password(self) -> None:
        """A different password does not verify."""
        assert verify_password("wrong-pass", hash_password("secret123")) is False

    def test__verify_password__malformed_hash(self) -> None:
        """A malformed stored hash is a mismatch, not a crash."""
        assert verify_password("secret123", "not-a-hash") is False


class TestAccessTokens:
    """Tests for token issue and verification."""

    def test__round_trip__returns_user_id(self, settings: Settings) -> None:
        """A freshly issued token decodes to its user id."""
        token = create_access_token(42, settings)
        assert decode_access_token(token, settings) == 42

    def test__expired_token__rejected(self, settings: Settings) -> None:
        """Expired tokens raise an authentication error."""
        token = create_access_token(42, settings, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AppError) as exc_info:
            decode_access_token(token, settings)
        assert exc_info.value.kind is ErrorKind.AUTHENTICATION
        assert exc_info.value.status_code == 401

    def test__wrong_secret__rejected(self, settings: Settings) -> None:
        """Tokens signed with another secret are rejected."""
        other = settings.model_copy(update={"jwt_secret": "another-secret"})
        token = create_access_token(42, other)
        with pytest.raises(AppError):
            decode_access_token(token, settings)

    def test__garbage_token__rejected(self, settings: Settings) -> None:
        """Non-JWT strings are rejected."""
        with pytest.raises(AppError):
            decode_access_token("not.a.token", settings)

    def test__token_without_user_id__rejected(self, settings: Settings) -> None:
        """A validly signed token must still carry a user id."""
        token = jwt.encode(
            {"sub": "someone"}, settings.jwt_secret, algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AppError):
            decode_access_token(token, settings)
