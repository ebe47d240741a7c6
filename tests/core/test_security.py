"""
Tests for password hashing and access tokens.
"""

from datetime import timedelta

from jose import jwt

from inventory_api.core.config import settings
from inventory_api.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_round_trip() -> None:
    hashed = get_password_hash("s3cret")

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_with_non_bcrypt_hash() -> None:
    assert verify_password("s3cret", "plain-text") is False


def test_access_token_claims() -> None:
    claims = decode_access_token(create_access_token(subject=7))

    assert claims is not None
    assert claims["sub"] == "7"
    assert claims["type"] == "access"
    assert claims["jti"]
    assert claims["exp"] > claims["iat"]


def test_each_token_has_its_own_jti() -> None:
    first = decode_access_token(create_access_token(subject=1))
    second = decode_access_token(create_access_token(subject=1))

    assert first["jti"] != second["jti"]


def test_expired_token_is_rejected() -> None:
    token = create_access_token(subject=1, expires_delta=timedelta(seconds=-5))

    assert decode_access_token(token) is None


def test_token_signed_with_other_key_is_rejected() -> None:
    token = jwt.encode({"sub": "1", "type": "access"}, "another-key", algorithm=settings.ALGORITHM)

    assert decode_access_token(token) is None


def test_token_of_other_type_is_rejected() -> None:
    token = jwt.encode({"sub": "1", "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    assert decode_access_token(token) is None
