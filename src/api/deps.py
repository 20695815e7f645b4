from __future__ import annotations

from collections.abc import Callable, Sequence

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from src.core.auth import Role, TokenError, create_access_token, decode_access_token
from src.core.config import get_settings
from src.domain.principals import Manager, Principal, Staff, Unauthenticated, role_of
from src.domain.services.ai_summary import AssessmentSummarizer
from src.domain.services.auth_service import RegistryAuthenticator, principal_from_claims
from src.domain.services.registry import AssessmentRegistry
from src.domain.services.review import AccessDeniedError, ReviewConsole

bearer_scheme = HTTPBearer(auto_error=False)


def get_registry(request: Request) -> AssessmentRegistry:
    """The registry built at startup."""
    return request.app.state.registry


def get_summarizer(request: Request) -> AssessmentSummarizer | None:
    return getattr(request.app.state, "summarizer", None)


def get_authenticator(
    registry: AssessmentRegistry = Depends(get_registry),  # noqa: B008
) -> RegistryAuthenticator:
    return RegistryAuthenticator(registry, get_settings())


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    registry: AssessmentRegistry = Depends(get_registry),  # noqa: B008
) -> Principal:
    """Resolve the authenticated principal from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    principal = principal_from_claims(payload)
    if isinstance(principal, Unauthenticated):
        raise _forbidden("Token missing required roles")

    # A manager exists only while some record still names them
    if isinstance(principal, Manager) and not registry.has_manager(principal.email):
        raise _unauthorized("Manager is no longer on the roster")

    return principal


def require_roles(required_roles: Sequence[str]) -> Callable[[Principal], Principal]:
    """Dependency factory enforcing that the principal holds one of the required roles."""
    settings = get_settings()
    allowed = set(settings.allowed_roles)

    invalid_roles = [role for role in required_roles if role not in allowed]
    if invalid_roles:
        joined_roles = ", ".join(invalid_roles)
        raise ValueError(f"Unsupported role(s) requested: {joined_roles}")

    required = set(required_roles)

    def dependency(
        principal: Principal = Depends(get_current_principal),  # noqa: B008
    ) -> Principal:
        role = role_of(principal)
        if role is None or role.value not in required:
            raise _forbidden("Insufficient role privileges")
        return principal

    return dependency


require_staff = require_roles([Role.STAFF.value])
require_assessor = require_roles([Role.MANAGER.value, Role.ADMIN.value])
require_admin = require_roles([Role.ADMIN.value])


def get_review_console(
    principal: Principal = Depends(require_assessor),  # noqa: B008
    registry: AssessmentRegistry = Depends(get_registry),  # noqa: B008
    summarizer: AssessmentSummarizer | None = Depends(get_summarizer),  # noqa: B008
) -> ReviewConsole:
    try:
        return ReviewConsole(registry, principal, summarizer)
    except AccessDeniedError as exc:
        raise _forbidden(str(exc)) from exc


def get_admin_console(
    principal: Principal = Depends(require_admin),  # noqa: B008
    registry: AssessmentRegistry = Depends(get_registry),  # noqa: B008
) -> ReviewConsole:
    return ReviewConsole(registry, principal)


def issue_smoke_token(email: str, *, role: Role) -> str:
    """Generate a signed token for manual smoke testing."""
    return create_access_token(email, roles=[role.value])


def staff_principal(principal: Principal = Depends(require_staff)) -> Staff:  # noqa: B008
    return principal  # type: ignore[return-value]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
