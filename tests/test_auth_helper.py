from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import HTTPException, status

from assetdex.core.config import settings
from assetdex.helpers import auth_helper


def _make_token(payload, key=None) -> str:
    return jwt.encode(
        payload,
        key or settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


def test_get_token_from_header_valid():
    token = "abc123"
    header = f"Bearer {token}"

    result = auth_helper._get_token_from_header(header)  # type: ignore[attr-defined]

    assert result == token


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "Token abc",
        "Bearer ",
        "bearer",  # missing token part
    ],
)
def test_get_token_from_header_invalid(header):
    with pytest.raises(HTTPException) as exc_info:
        auth_helper._get_token_from_header(header)  # type: ignore[attr-defined]

    assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED


def test_decode_access_token_roundtrip():
    token = _make_token({"sub": "7", "username": "jdoe"})

    decoded = auth_helper.decode_access_token(token)

    assert decoded["sub"] == "7"
    assert decoded["username"] == "jdoe"


def test_decode_access_token_expired_raises_419():
    payload = {
        "sub": "1",
        "exp": int((datetime.now(timezone.utc) - timedelta(seconds=1)).timestamp()),
    }
    expired_token = _make_token(payload)

    with pytest.raises(HTTPException) as exc_info:
        auth_helper.decode_access_token(expired_token)

    assert exc_info.value.status_code == 419
    assert "expired" in exc_info.value.detail.lower()


def test_decode_access_token_invalid_signature_raises_401():
    # Token signed with a different key should be rejected
    bogus_token = _make_token({"sub": "1"}, key="wrong-key")

    with pytest.raises(HTTPException) as exc_info:
        auth_helper.decode_access_token(bogus_token)

    assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
    assert "invalid" in exc_info.value.detail.lower()


def test_get_current_user_builds_user_from_claims():
    token = _make_token(
        {"sub": "42", "username": "jdoe", "email": "jdoe@example.com", "roles": ["editor", "Viewer"]}
    )

    user = auth_helper.get_current_user(authorization=f"Bearer {token}")

    assert user == auth_helper.TokenUser(
        id="42",
        username="jdoe",
        email="jdoe@example.com",
        roles=["EDITOR", "VIEWER"],
    )


def test_get_current_user_accepts_single_role_string():
    token = _make_token({"sub": "1", "roles": "admin"})

    user = auth_helper.get_current_user(authorization=f"Bearer {token}")

    assert user.roles == ["ADMIN"]


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "nobody"},
        {"sub": "1", "is_active": False},
    ],
)
def test_get_current_user_rejects_unusable_tokens(payload):
    token = _make_token(payload)

    with pytest.raises(HTTPException) as exc_info:
        auth_helper.get_current_user(authorization=f"Bearer {token}")

    assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
