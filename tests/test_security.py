"""Tests for session token issuing / verification and password hashing."""

import string
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from pantry.core.config import settings
from pantry.core.security import (SessionClaims, TokenBadSignature, TokenExpired,
                                  TokenMalformed, get_password_hash, issue_session_token,
                                  verify_password, verify_session_token)
from pantry.models.user import Role


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret1")
    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)


def test_token_carries_subject_and_role():
    token = issue_session_token(42, Role.DISPATCHER)
    claims = verify_session_token(token)
    assert isinstance(claims, SessionClaims)
    assert claims.subject_id == 42
    assert claims.role is Role.DISPATCHER
    assert not claims.is_admin


def test_token_lifetime_defaults_to_thirty_days():
    claims = verify_session_token(issue_session_token(1, Role.ADMIN))
    remaining = claims.expires_at - datetime.now(timezone.utc)
    assert timedelta(days=29, hours=23) < remaining <= timedelta(days=30)


def test_expired_token_rejected():
    token = issue_session_token(1, Role.EMPLOYEE, expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenExpired):
        verify_session_token(token)


def test_token_signed_with_other_key_rejected():
    token = jwt.encode(
        {"sub": "1", "role": "admin", "exp": 9999999999},
        "some-other-key",
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(TokenBadSignature):
        verify_session_token(token)


@pytest.mark.parametrize("token", ["", "garbage", "a.b", "not.a.token", "...."])
def test_unparseable_token_is_malformed(token):
    with pytest.raises(TokenMalformed):
        verify_session_token(token)


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "1", "role": "peon", "exp": 9999999999},
        {"sub": "1", "role": "superuser", "exp": 9999999999},
        {"sub": "abc", "role": "admin", "exp": 9999999999},
        {"sub": "1", "exp": 9999999999},
        {"sub": "1", "role": "admin"},
    ],
)
def test_signed_token_with_bad_claims_is_malformed(claims):
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(TokenMalformed):
        verify_session_token(token)


def test_mutating_any_character_breaks_the_token():
    token = issue_session_token(7, Role.EMPLOYEE)

    for i, ch in enumerate(token):
        if ch == ".":
            continue
        replacement = "A" if ch != "A" else "B"
        tampered = token[:i] + replacement + token[i + 1:]
        with pytest.raises((TokenMalformed, TokenExpired, TokenBadSignature)):
            verify_session_token(tampered)


B64URL = string.ascii_letters + string.digits + "-_"


@pytest.mark.parametrize("subject_id", range(1, 40))
def test_spare_bits_in_segment_tail_are_not_ignored(subject_id):
    token = issue_session_token(subject_id, Role.EMPLOYEE)
    head, last = token[:-1], token[-1]

    for ch in B64URL:
        if ch == last:
            continue
        with pytest.raises((TokenMalformed, TokenBadSignature)):
            verify_session_token(head + ch)


@pytest.mark.parametrize("segment", [0, 1])
def test_non_canonical_header_or_payload_is_malformed(segment):
    parts = issue_session_token(3, Role.ADMIN).split(".")
    parts[segment] += "="
    with pytest.raises(TokenMalformed):
        verify_session_token(".".join(parts))
