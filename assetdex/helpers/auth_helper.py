# assetdex/helpers/auth_helper.py
"""
Bearer token handling.

Access tokens are issued by the identity service in front of this API; here
they are only decoded and their claims turned into a lightweight user.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import jwt
from fastapi import Header, HTTPException, status

from assetdex.core.config import settings


@dataclass(frozen=True)
class TokenUser:
    """The caller as described by the access token claims."""

    id: str
    username: str | None = None
    email: str | None = None
    roles: List[str] = field(default_factory=list)


def _get_token_from_header(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
        )
    scheme, _, token_str = authorization.partition(" ")
    token_str = token_str.strip()
    if scheme.lower() != "bearer" or not token_str:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )
    return token_str


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT access token.

    - Returns payload on success
    - Raises HTTPException(419) if token is expired
    - Raises HTTPException(401) for other validation errors
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=419,
            detail="Access token expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
        )


def get_current_user(
    authorization: str | None = Header(None, alias="Authorization"),
) -> TokenUser:
    """
    Dependency that validates the bearer token and returns the caller.

    The token must carry a `sub` claim; an `is_active: false` claim is rejected.
    """
    payload = decode_access_token(_get_token_from_header(authorization))

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token missing subject",
        )

    if payload.get("is_active") is False:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive or invalid user",
        )

    raw_roles = payload.get("roles") or []
    if isinstance(raw_roles, str):
        raw_roles = [raw_roles]

    return TokenUser(
        id=str(user_id),
        username=payload.get("username"),
        email=payload.get("email"),
        roles=[str(r).upper() for r in raw_roles],
    )
