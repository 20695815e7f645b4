from datetime import UTC, datetime, timedelta

import jwt
import pytest
from src.core.auth import TokenError, create_access_token, decode_access_token
from src.core.config import get_settings


def test_create_and_decode_token_roundtrip() -> None:
    token = create_access_token("  Jane@Example.com ", roles=["staff"])

    payload = decode_access_token(token)

    assert payload["sub"] == "jane@example.com"
    assert payload["roles"] == ["staff"]
    assert payload["iss"] == get_settings().app_name


def test_unknown_role_cannot_be_issued() -> None:
    with pytest.raises(TokenError):
        create_access_token("jane@example.com", roles=["student"])


def test_token_carries_exactly_one_role() -> None:
    with pytest.raises(TokenError, match="exactly one role"):
        create_access_token("mark@example.com", roles=["manager", "admin"])
    with pytest.raises(TokenError):
        create_access_token("mark@example.com", roles=[])


def test_expired_token_is_rejected() -> None:
    token = create_access_token(
        "jane@example.com", roles=["staff"], expires_delta=timedelta(seconds=-5)
    )

    with pytest.raises(TokenError):
        decode_access_token(token)


def test_foreign_issuer_is_rejected() -> None:
    settings = get_settings()
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "jane@example.com",
            "roles": ["staff"],
            "exp": int((now + timedelta(minutes=5)).timestamp()),
            "iss": "someone-else",
        },
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(TokenError):
        decode_access_token(token)
