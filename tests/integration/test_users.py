"""Integration tests: Users endpoints."""

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_read_current_user(async_client: AsyncClient, api_base: str, registered_user: dict):
    resp = await async_client.get(f"{api_base}/users/me", headers=registered_user["headers"])
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["email"] == registered_user["email"]
    assert data["role"] == "user"
    assert data["id"] == registered_user["user_id"]


@pytest.mark.asyncio
async def test_read_current_user_requires_token(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/users/me")
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_read_current_user_bad_token(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(
        f"{api_base}/users/me", headers={"Authorization": "Bearer not-a-token"}
    )
    assert resp.status_code == 401
