"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field
from src.core.auth import Role

# --- Request Schemas ---


class StaffLoginRequest(BaseModel):
    """Staff sign in with their roster email only."""

    email: str = Field(..., min_length=1, description="Employee email address")


class ManagerLoginRequest(BaseModel):
    """Managers and the administrator sign in with email and password."""

    email: str = Field(..., min_length=1, description="Manager or admin email address")
    password: str = Field(..., description="Manager or master password")


# --- Response Schemas ---


class TokenResponse(BaseModel):
    """Response schema containing the JWT access token."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token TTL in seconds")
    email: str = Field(..., description="Lower-cased principal email")
    role: Role = Field(..., description="Resolved principal role")


class MeResponse(BaseModel):
    """Response schema for the current principal."""

    email: str
    role: Role
