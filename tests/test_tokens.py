"""Tests for access tokens and reset tickets."""
import hashlib
import uuid
from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from lms_backend.core.exceptions import InvalidTokenError
from lms_backend.core.tokens import TokenIssuer, generate_reset_token, hash_reset_token

SECRET = "test-signing-key"


@pytest.fixture
def issuer():
    return TokenIssuer(secret_key=SECRET, algorithm="HS256", expire_minutes=24 * 60)


@pytest.fixture
def user():
    return SimpleNamespace(id=uuid.uuid4(), email="ama@example.com", role="admin", token_version=3)


def test_issue_and_verify_round_trip(issuer, user):
    claims = issuer.verify(issuer.issue(user))

    assert claims.sub == user.id
    assert claims.email == "ama@example.com"
    assert claims.role == "admin"
    assert claims.token_version == 3
    assert claims.exp - claims.iat == 24 * 60 * 60
    assert issuer.expires_in == 86400


def test_expired_token_rejected(issuer, user):
    token = issuer.issue(user, expires_delta=timedelta(seconds=-1))

    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_token_signed_with_other_key_rejected(issuer, user):
    other = TokenIssuer(secret_key="another-key")

    with pytest.raises(InvalidTokenError):
        issuer.verify(other.issue(user))


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_rejected(issuer, token):
    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_token_of_other_type_rejected(issuer, user):
    token = jwt.encode(
        {"sub": str(user.id), "email": user.email, "role": user.role,
         "token_version": 0, "type": "refresh", "exp": 9999999999},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_token_missing_claims_rejected(issuer):
    token = jwt.encode({"sub": "not-a-uuid", "type": "access", "exp": 9999999999}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_reset_token_pair():
    raw_token, hashed_token = generate_reset_token()

    # 256 bits of entropy, hex encoded
    assert len(raw_token) == 64
    int(raw_token, 16)
    assert hashed_token == hashlib.sha256(raw_token.encode()).hexdigest()
    assert hashed_token == hash_reset_token(raw_token)
    assert hashed_token != raw_token


def test_reset_tokens_are_unique():
    tokens = {generate_reset_token()[0] for _ in range(50)}

    assert len(tokens) == 50
