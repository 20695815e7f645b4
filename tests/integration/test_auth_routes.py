"""Integration tests for authentication endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient
from src.core.auth import Role
from src.domain.services.registry import AssessmentRegistry

from tests.utils import auth_headers


class TestStaffLoginEndpoint:
    """Tests for POST /auth/staff-login."""

    @pytest.mark.asyncio
    async def test_staff_login_success(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/auth/staff-login", json={"email": "JANE@example.com"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["role"] == "staff"
        assert data["email"] == "jane@example.com"
        assert data["token_type"] == "bearer"
        assert data["access_token"]

    @pytest.mark.asyncio
    async def test_staff_login_unknown_email(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/staff-login", json={"email": "ghost@example.com"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == 'Email "ghost@example.com" not found in registry.'


class TestManagerLoginEndpoint:
    """Tests for POST /auth/manager-login."""

    @pytest.mark.asyncio
    async def test_manager_login_with_default_password(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/manager-login",
            json={"email": "mark@example.com", "password": "metabev2025"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "manager"

    @pytest.mark.asyncio
    async def test_admin_login(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/manager-login",
            json={"email": "admin@metabev.com", "password": "metabevadmin"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "admin"

    @pytest.mark.asyncio
    async def test_wrong_password(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/manager-login",
            json={"email": "mary@example.com", "password": "metabev2025"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid credentials."

    @pytest.mark.asyncio
    async def test_missing_password_field(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/auth/manager-login", json={"email": "mark@example.com"}
        )

        assert response.status_code == 422


class TestMeEndpoint:
    """Tests for GET /auth/me."""

    @pytest.mark.asyncio
    async def test_login_token_resolves_principal(self, async_client: AsyncClient) -> None:
        login = await async_client.post(
            "/auth/manager-login",
            json={"email": "Mark@Example.com", "password": "metabev2025"},
        )
        token = login.json()["access_token"]

        response = await async_client.get(
            "/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"email": "mark@example.com", "role": "manager"}

    @pytest.mark.asyncio
    async def test_missing_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_invalid_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get(
            "/auth/me", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_manager_token_revoked_when_no_record_names_them(
        self, async_client: AsyncClient, seeded_registry: AssessmentRegistry
    ) -> None:
        headers = auth_headers("mary@example.com", Role.MANAGER)
        ann = seeded_registry.get_by_employee_email("ann@example.com")
        assert ann is not None
        await seeded_registry.remove(ann.id)

        response = await async_client.get("/auth/me", headers=headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
