"""Unit tests for sx_gateway.auth — JWT handling and password hashing."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from src.sx_common.errors import InvalidCredentialsError, InvalidRefreshTokenError
from src.sx_gateway.auth.jwt_handler import (
    access_token_ttl_seconds,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.sx_gateway.auth.password import hash_password, password_fits, verify_password


def test_access_token_claims() -> None:
    claims = jwt.get_unverified_claims(create_access_token("user-123"))
    assert claims["sub"] == "user-123"
    assert claims["type"] == "access"


def test_refresh_token_claims() -> None:
    claims = jwt.get_unverified_claims(create_refresh_token("user-123"))
    assert claims["type"] == "refresh"


def test_round_trip_access() -> None:
    assert decode_token(create_access_token("u1"), expected_type="access")["sub"] == "u1"


def test_refresh_token_is_not_an_access_token() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(create_refresh_token("u1"), expected_type="access")


def test_access_token_is_not_a_refresh_token() -> None:
    with pytest.raises(InvalidRefreshTokenError):
        decode_token(create_access_token("u1"), expected_type="refresh")


def test_garbage_token() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not.a.token", expected_type="access")


def test_token_signed_with_other_secret() -> None:
    forged = jwt.encode({"sub": "u1", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(forged, expected_type="access")


def test_expired_access_token() -> None:
    with patch.dict(
        "src.sx_gateway.auth.jwt_handler._LIFETIMES", {"access": timedelta(seconds=-1)}
    ):
        token = create_access_token("u1")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token, expected_type="access")


def test_ttl_matches_settings() -> None:
    assert access_token_ttl_seconds() == 30 * 60


class TestPassword:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)

    def test_over_long_password_never_matches(self) -> None:
        hashed = hash_password("a" * 72)
        assert not password_fits("a" * 73)
        assert not verify_password("a" * 73, hashed)
