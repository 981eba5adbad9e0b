"""Unit tests for password hashing and access tokens"""

import pytest
from datetime import datetime, timedelta, timezone
from finquest.domain.exceptions import AuthenticationError
from finquest.infrastructure.security import check_password, decode_token, hash_password, issue_token


def test_password_hash_round_trip():
    password_hash = hash_password("secret123")

    assert password_hash != "secret123"
    assert check_password("secret123", password_hash)
    assert not check_password("secret124", password_hash)


def test_check_password_against_non_bcrypt_hash():
    assert check_password("secret123", "plaintext") is False


def test_token_carries_user_id():
    token = issue_token("user-1", "9876543210")
    assert decode_token(token) == "user-1"


def test_expired_token_rejected():
    token = issue_token("user-1", "9876543210", now=datetime.now(timezone.utc) - timedelta(days=30))
    with pytest.raises(AuthenticationError):
        decode_token(token)


def test_tampered_token_rejected():
    token = issue_token("user-1", "9876543210")
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(AuthenticationError):
        decode_token(tampered)


def test_garbage_token_rejected():
    with pytest.raises(AuthenticationError):
        decode_token("not-a-token")
