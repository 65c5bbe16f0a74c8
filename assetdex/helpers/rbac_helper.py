# assetdex/helpers/rbac_helper.py
"""
Role-based access control for the rack endpoints.

Access is derived from the `roles` claim of the bearer token. Levels are
ordered: admin > editor > viewer. Reading occupancy needs viewer; moving a
server needs editor.
"""
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Set

from fastapi import Depends, Header, HTTPException, status

from assetdex.helpers.auth_helper import _get_token_from_header, decode_access_token


class AccessLevel(str, Enum):
    admin = "admin"
    editor = "editor"
    viewer = "viewer"


ADMIN_CODES: Set[str] = {"ADMIN", "SUPER_ADMIN"}
EDITOR_CODES: Set[str] = {"EDITOR", "ENGINEER"}
VIEWER_CODES: Set[str] = {"VIEWER", "USER"}

_RANK: Dict[AccessLevel, int] = {
    AccessLevel.viewer: 1,
    AccessLevel.editor: 2,
    AccessLevel.admin: 3,
}


def _role_codes(raw_roles: Any) -> Set[str]:
    if not raw_roles:
        return set()
    if isinstance(raw_roles, str):
        return {raw_roles.upper()}
    if isinstance(raw_roles, Iterable):
        return {str(r).upper() for r in raw_roles}
    return set()


def _access_level_from_roles(roles: Set[str]) -> AccessLevel:
    """Highest level granted by a set of upper-cased role codes."""
    if roles & ADMIN_CODES:
        return AccessLevel.admin
    if roles & EDITOR_CODES:
        return AccessLevel.editor
    # Unknown or missing roles can still read inventory
    return AccessLevel.viewer


def get_access_level(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> AccessLevel:
    """FastAPI dependency resolving the caller's AccessLevel from the token."""
    payload = decode_access_token(_get_token_from_header(authorization))

    if payload.get("is_superuser"):
        return AccessLevel.admin
    return _access_level_from_roles(_role_codes(payload.get("roles")))


def _ensure_level(access_level: AccessLevel, minimum: AccessLevel, detail: str) -> AccessLevel:
    if _RANK.get(access_level, 0) < _RANK[minimum]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return access_level


def require_at_least_viewer(
    access_level: AccessLevel = Depends(get_access_level),
) -> AccessLevel:
    return _ensure_level(
        access_level,
        AccessLevel.viewer,
        "You do not have permission to view this resource.",
    )


def require_editor_or_admin(
    access_level: AccessLevel = Depends(get_access_level),
) -> AccessLevel:
    """Placement changes: editor or admin."""
    return _ensure_level(
        access_level,
        AccessLevel.editor,
        "You need editor or admin access to move servers.",
    )
