"""Integration tests: Auth endpoints."""

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_success(async_client: AsyncClient, api_base: str, unique_suffix: str):
    resp = await async_client.post(
        f"{api_base}/auth/register",
        json={
            "email": f"reg_{unique_suffix}@test.com",
            "password": "SecurePass123!",
            "name": f"Seller {unique_suffix}",
        },
    )
    assert resp.status_code == 200
    assert "user_id" in resp.json()["data"]


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client: AsyncClient, api_base: str, unique_suffix: str):
    email = f"dup_{unique_suffix}@test.com"
    body = {"email": email, "password": "SecurePass123!", "name": "Dup"}
    await async_client.post(f"{api_base}/auth/register", json=body)
    resp = await async_client.post(f"{api_base}/auth/register", json=body)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_register_short_password(async_client: AsyncClient, api_base: str, unique_suffix: str):
    resp = await async_client.post(
        f"{api_base}/auth/register",
        json={"email": f"short_{unique_suffix}@test.com", "password": "abc", "name": "S"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_login_returns_tokens(async_client: AsyncClient, api_base: str, registered_user: dict):
    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["token_type"] == "bearer"
    assert data["role"] == "user"
    assert data["access_token"]
    assert data["refresh_token"]


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, api_base: str, registered_user: dict):
    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": registered_user["email"], "password": "WrongPassword!"},
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token(async_client: AsyncClient, api_base: str, registered_user: dict):
    resp = await async_client.post(
        f"{api_base}/auth/refresh",
        json={"refresh_token": registered_user["refresh_token"]},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["access_token"]
    assert data["refresh_token"] is None


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(async_client: AsyncClient, api_base: str, registered_user: dict):
    access = registered_user["headers"]["Authorization"].split()[1]
    resp = await async_client.post(f"{api_base}/auth/refresh", json={"refresh_token": access})
    assert resp.status_code == 401
