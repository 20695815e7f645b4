"""
Signed session tokens for the appraisal portal.

A token is issued after the authentication gate resolves a principal and
carries the lower-cased email as ``sub`` plus a one-element ``roles`` list:
``staff`` for the self-assessment form, ``manager`` or ``admin`` for the
review console.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from src.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be issued, decoded or validated."""


class Role(str, Enum):
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}


def _single_role(roles: Sequence[str]) -> str:
    if len(roles) != 1:
        raise TokenError("A token carries exactly one role")
    role = roles[0]
    if not Role.contains(role) or role not in get_settings().allowed_roles:
        raise TokenError(f"Unsupported role: {role}")
    return role


def create_access_token(
    email: str,
    *,
    roles: Sequence[str],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token for ``email`` holding one appraisal role."""
    subject = email.strip().lower()
    if not subject:
        raise TokenError("Token subject is empty")
    role = _single_role(roles)

    settings = get_settings()
    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload = {
        "sub": subject,
        "roles": [role],
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and issuer; the role must still be allowed."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "roles", "exp", "iss"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    roles = payload.get("roles")
    if not isinstance(roles, list):
        raise TokenError("Invalid token")
    _single_role(roles)
    return payload
