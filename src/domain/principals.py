"""Who is calling: a closed union resolved by the authentication gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from src.core.auth import Role


@dataclass(frozen=True, slots=True)
class Unauthenticated:
    pass


@dataclass(frozen=True, slots=True)
class Staff:
    email: str


@dataclass(frozen=True, slots=True)
class Manager:
    email: str


@dataclass(frozen=True, slots=True)
class Admin:
    email: str


Principal: TypeAlias = Unauthenticated | Staff | Manager | Admin


def role_of(principal: Principal) -> Role | None:
    match principal:
        case Staff():
            return Role.STAFF
        case Manager():
            return Role.MANAGER
        case Admin():
            return Role.ADMIN
        case Unauthenticated():
            return None


def is_assessor(principal: Principal) -> bool:
    """Managers and admins may open the review console."""
    return isinstance(principal, Manager | Admin)
