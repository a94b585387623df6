"""Tests for auth API endpoints: register, login, refresh, me."""

import uuid

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import make_user
from villamarket.auth.tokens import create_access_token, create_refresh_token
from villamarket.models.user import User


def _email(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@test.com"


class TestRegister:
    """POST /api/v1/auth/register."""

    async def test_register_guest_by_default(self, client: AsyncClient):
        email = _email("register")
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": "securepass123", "name": "New User"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == email
        assert data["user"]["account_type"] == "guest"
        assert "access_token" in data["tokens"]
        assert "refresh_token" in data["tokens"]
        assert "hashed_password" not in data["user"]

    async def test_register_host(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": _email("host"),
                "password": "securepass123",
                "name": "New Host",
                "phone_number": "+15550100001",
                "account_type": "host",
            },
        )
        assert response.status_code == 201
        assert response.json()["user"]["account_type"] == "host"

    async def test_register_duplicate_email(self, client: AsyncClient, guest_user: User):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": guest_user.email, "password": "newpass123", "name": "New"},
        )
        assert response.status_code == 409
        assert "already registered" in response.json()["detail"].lower()

    async def test_register_duplicate_phone(self, client: AsyncClient, db_session: AsyncSession):
        user = await make_user(db_session)
        user.phone_number = "+15550100002"
        await db_session.flush()

        response = await client.post(
            "/api/v1/auth/register",
            json={"email": _email("phone"), "password": "newpass123", "name": "New", "phone_number": "+15550100002"},
        )
        assert response.status_code == 409
        assert "phone" in response.json()["detail"].lower()

    async def test_register_unknown_account_type(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": _email("admin"), "password": "securepass123", "name": "X", "account_type": "admin"},
        )
        assert response.status_code == 422

    async def test_register_missing_fields(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={"email": "bad@test.com"})
        assert response.status_code == 422


class TestLogin:
    """POST /api/v1/auth/login."""

    async def test_login_success(self, client: AsyncClient, guest_user: User):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": guest_user.email, "password": "testpass123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == str(guest_user.id)
        assert data["tokens"]["token_type"] == "bearer"

    async def test_login_wrong_password(self, client: AsyncClient, guest_user: User):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": guest_user.email, "password": "wrong_pass"},
        )
        assert response.status_code == 401

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": _email("nobody"), "password": "whatever1"},
        )
        assert response.status_code == 401

    async def test_login_inactive(self, client: AsyncClient, db_session: AsyncSession, guest_user: User):
        guest_user.is_active = False
        await db_session.flush()
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": guest_user.email, "password": "testpass123"},
        )
        assert response.status_code == 403


class TestRefresh:
    """POST /api/v1/auth/refresh."""

    async def test_refresh_success(self, client: AsyncClient, guest_user: User):
        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": create_refresh_token(guest_user.id)},
        )
        assert response.status_code == 200
        assert "access_token" in response.json()

    async def test_refresh_with_access_token_rejected(self, client: AsyncClient, guest_user: User):
        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": create_access_token(guest_user.id)},
        )
        assert response.status_code == 401

    async def test_refresh_unknown_user(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": create_refresh_token(uuid.uuid4())},
        )
        assert response.status_code == 401

    async def test_refresh_garbage(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})
        assert response.status_code == 401


class TestMe:
    """GET /api/v1/auth/me."""

    async def test_me(self, client: AsyncClient, host_user: User, host_headers: dict):
        response = await client.get("/api/v1/auth/me", headers=host_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(host_user.id)
        assert data["account_type"] == "host"
