from datetime import datetime, timedelta

import pytest
from jose import jwt

from tenantcrm.auth import security
from tenantcrm.auth.security import (
    create_access_token,
    generate_refresh_token,
    hash_password,
    hash_token,
    refresh_token_expiry,
    verify_access_token,
    verify_password,
)


def test_password_hash_round_trip_and_rejects_wrong_password():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_password_never_raises_on_bad_input():
    assert not verify_password("secret123", None)
    assert not verify_password("secret123", "not-a-bcrypt-hash")
    assert not verify_password("x" * 100, hash_password("secret123"))


def test_hash_password_enforces_bcrypt_byte_limit():
    # 36 characters, 72 bytes: allowed
    hash_password("é" * 36)
    with pytest.raises(ValueError):
        hash_password("é" * 37)


def test_access_token_carries_identity_and_tenant():
    token = create_access_token("u_1", "alice@example.com", "t_1")

    payload = verify_access_token(token)

    assert payload is not None
    assert payload.user_id == "u_1"
    assert payload.email == "alice@example.com"
    assert payload.tenant_id == "t_1"


def test_access_token_without_tenant_is_valid():
    payload = verify_access_token(create_access_token("u_1", "alice@example.com", None))

    assert payload is not None
    assert payload.tenant_id is None


def test_access_token_expires_after_fifteen_minutes():
    issued = datetime.utcnow() - timedelta(minutes=16)
    token = create_access_token("u_1", "alice@example.com", "t_1", now=issued)

    assert verify_access_token(token) is None


def test_access_token_still_valid_within_window():
    issued = datetime.utcnow() - timedelta(minutes=14)
    token = create_access_token("u_1", "alice@example.com", "t_1", now=issued)

    assert verify_access_token(token) is not None


def test_tampered_or_foreign_tokens_are_rejected():
    token = create_access_token("u_1", "alice@example.com", "t_1")
    head, body, sig = token.split(".")
    flipped = sig[:-2] + ("AA" if sig[-2:] != "AA" else "BB")

    assert verify_access_token(f"{head}.{body}.{flipped}") is None
    assert verify_access_token("garbage") is None

    forged = jwt.encode(
        {"sub": "u_1", "email": "alice@example.com", "tenant_id": "t_2", "typ": "access"},
        "some-other-secret",
        algorithm="HS256",
    )
    assert verify_access_token(forged) is None


def test_token_with_wrong_type_is_rejected():
    token = jwt.encode(
        {"sub": "u_1", "email": "alice@example.com", "typ": "refresh"},
        security.JWT_SECRET,
        algorithm=security.JWT_ALG,
    )

    assert verify_access_token(token) is None


def test_refresh_tokens_are_long_random_and_hashed():
    first, second = generate_refresh_token(), generate_refresh_token()

    assert len(first) == 128
    assert first != second
    assert hash_token(first) != first
    assert hash_token(first) == hash_token(first)
    assert len(hash_token(first)) == 64


def test_refresh_token_expiry_is_thirty_days_out():
    now = datetime(2026, 1, 1)

    assert refresh_token_expiry(now) == datetime(2026, 1, 31)
