"""Unit tests for password hashing and JWT helpers."""

from datetime import timedelta

from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("SecurePass123!")
    assert hashed != "SecurePass123!"
    assert verify_password("SecurePass123!", hashed)
    assert not verify_password("wrong", hashed)


def test_long_passwords_truncated_consistently():
    password = "é" * 100
    hashed = get_password_hash(password)
    assert verify_password(password, hashed)


def test_token_types():
    claims = {"sub": "user-1", "role": "admin"}
    access = decode_token(create_access_token(claims))
    refresh = decode_token(create_refresh_token(claims))
    assert access["type"] == "access"
    assert refresh["type"] == "refresh"
    assert access["sub"] == "user-1"
    assert access["role"] == "admin"


def test_expired_token_rejected():
    token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-10))
    assert decode_token(token) is None


def test_garbage_token_rejected():
    assert decode_token("not.a.token") is None
