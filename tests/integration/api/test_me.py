import pytest
from httpx import AsyncClient

from tests.fixtures.http import bearer


@pytest.mark.asyncio
async def test_me_returns_principal(client: AsyncClient, register):
    tokens = await register(email="user@acme.com")

    response = await client.get("/auth/me", headers=bearer(tokens["access_token"]))

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "user@acme.com"
    assert data["is_active"] is True
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_INVALID"


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token(client: AsyncClient, register):
    tokens = await register()

    response = await client.get("/auth/me", headers=bearer(tokens["refresh_token"]))

    assert response.status_code == 401
