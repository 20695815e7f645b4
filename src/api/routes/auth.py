"""Authentication routes - staff login, manager/admin login, current principal."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from src.api.deps import get_authenticator, get_current_principal
from src.api.schemas.auth import (
    ManagerLoginRequest,
    MeResponse,
    StaffLoginRequest,
    TokenResponse,
)
from src.core.config import get_settings
from src.domain.principals import Admin, Manager, Principal, Staff, role_of
from src.domain.services.auth_service import (
    EmailNotFoundError,
    InvalidCredentialsError,
    RegistryAuthenticator,
    issue_token,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


def _token_response(principal: Staff | Manager | Admin) -> TokenResponse:
    return TokenResponse(
        access_token=issue_token(principal),
        expires_in=get_settings().access_token_ttl_seconds,
        email=principal.email,
        role=role_of(principal),
    )


@router.post(
    "/staff-login",
    response_model=TokenResponse,
    summary="Staff login",
    description="Sign in with a roster email; no password is asked of staff.",
)
async def staff_login(
    payload: StaffLoginRequest,
    authenticator: RegistryAuthenticator = Depends(get_authenticator),
) -> TokenResponse:
    try:
        principal = authenticator.staff_login(payload.email)
    except EmailNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    return _token_response(principal)


@router.post(
    "/manager-login",
    response_model=TokenResponse,
    summary="Manager or admin login",
    description="Authenticate a manager (per-record or default password) or the administrator.",
)
async def manager_login(
    payload: ManagerLoginRequest,
    authenticator: RegistryAuthenticator = Depends(get_authenticator),
) -> TokenResponse:
    try:
        principal = authenticator.assessor_login(payload.email, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    return _token_response(principal)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current principal",
)
async def get_me(principal: Principal = Depends(get_current_principal)) -> MeResponse:
    return MeResponse(email=principal.email, role=role_of(principal))  # type: ignore[union-attr]
