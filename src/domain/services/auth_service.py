"""Authentication gate.

Resolves a login attempt to a principal by scanning the registry; there is
no credential store. A manager "account" exists only while at least one
record names that manager. The gate sits behind the ``Authenticator``
protocol so an identity provider can replace it.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import structlog
from src.core.auth import Role, create_access_token
from src.core.config import Settings, get_settings
from src.domain.models import Assessment, normalize_email
from src.domain.principals import Admin, Manager, Principal, Staff, Unauthenticated
from src.domain.services.registry import AssessmentRegistry

logger = structlog.get_logger()


class AuthError(Exception):
    """Base exception for authentication errors."""


class EmailNotFoundError(AuthError):
    """Raised when a staff email is not on the roster."""


class InvalidCredentialsError(AuthError):
    """Raised when assessor credentials match nothing."""


class Authenticator(Protocol):
    def staff_login(self, email: str) -> Staff: ...

    def assessor_login(self, email: str, password: str) -> Manager | Admin: ...


class RegistryAuthenticator:
    """Default gate: static admin credentials plus a scan of manager fields."""

    def __init__(self, registry: AssessmentRegistry, settings: Settings | None = None) -> None:
        self.registry = registry
        self.settings = settings or get_settings()

    def staff_login(self, email: str) -> Staff:
        key = normalize_email(email)
        if key == normalize_email(self.settings.super_admin_email):
            return Staff(email=key)
        if key and self.registry.get_by_employee_email(key) is not None:
            logger.info("staff_login_success", email=key)
            return Staff(email=key)

        logger.warning("staff_login_not_found", email=key)
        # Unlike the assessor path this tells the caller the email is unknown
        raise EmailNotFoundError(f'Email "{key}" not found in registry.')

    def assessor_login(self, email: str, password: str) -> Manager | Admin:
        key = normalize_email(email)
        if (
            key == normalize_email(self.settings.super_admin_email)
            and password == self.settings.master_admin_password
        ):
            logger.info("admin_login_success", email=key)
            return Admin(email=key)

        for record in self.registry.get_by_manager_email(key):
            if self._password_matches(record, password):
                logger.info("manager_login_success", email=key)
                return Manager(email=key)

        logger.warning("assessor_login_failed", email=key)
        raise InvalidCredentialsError("Invalid credentials.")

    def _password_matches(self, record: Assessment, password: str) -> bool:
        if record.manager_password:
            return record.manager_password == password
        return password == self.settings.default_manager_password


def scope_records(principal: Principal, records: Sequence[Assessment]) -> list[Assessment]:
    """Records the principal may see."""
    match principal:
        case Admin():
            return list(records)
        case Manager(email=email):
            key = normalize_email(email)
            return [record for record in records if record.manager_email_key == key]
        case Staff(email=email):
            key = normalize_email(email)
            return [record for record in records if record.employee_email == key]
        case Unauthenticated():
            return []


def issue_token(principal: Staff | Manager | Admin) -> str:
    match principal:
        case Staff(email=email):
            roles = [Role.STAFF.value]
        case Manager(email=email):
            roles = [Role.MANAGER.value]
        case Admin(email=email):
            roles = [Role.ADMIN.value]
    return create_access_token(email, roles=roles)


def principal_from_claims(claims: dict) -> Principal:
    """Rebuild the principal carried by a decoded token."""
    email = normalize_email(claims.get("sub"))
    roles = set(claims.get("roles", []))
    if not email:
        return Unauthenticated()
    if Role.ADMIN.value in roles:
        return Admin(email=email)
    if Role.MANAGER.value in roles:
        return Manager(email=email)
    if Role.STAFF.value in roles:
        return Staff(email=email)
    return Unauthenticated()
