from datetime import timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient

from authcore.domain.base import utc_now
from authcore.domain.entities import Session
from tests.fixtures.http import ADMIN_HEADERS


@pytest.mark.asyncio
async def test_cleanup_requires_admin_key(client: AsyncClient):
    missing = await client.post("/admin/sessions/cleanup-expired")
    wrong = await client.post(
        "/admin/sessions/cleanup-expired", headers={"X-Admin-API-Key": "nope"}
    )

    assert missing.status_code == wrong.status_code == 401


@pytest.mark.asyncio
async def test_cleanup_expired(client: AsyncClient, register, db_session):
    tokens = await register()
    db_session.add(
        Session(
            user_id=UUID(tokens["user"]["id"]),
            session_id="expired-session",
            refresh_token_hash="0" * 64,
            expires_at=utc_now() - timedelta(minutes=5),
        )
    )
    await db_session.commit()

    response = await client.post("/admin/sessions/cleanup-expired", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"deleted_count": 1}

    live = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert live.status_code == 200


@pytest.mark.asyncio
async def test_cleanup_revoked_keeps_recent(client: AsyncClient, register):
    tokens = await register()
    await client.post("/auth/logout", json={"refresh_token": tokens["refresh_token"]})

    response = await client.post(
        "/admin/sessions/cleanup-revoked?retention_days=30", headers=ADMIN_HEADERS
    )
    immediate = await client.post(
        "/admin/sessions/cleanup-revoked?retention_days=0", headers=ADMIN_HEADERS
    )

    assert response.json() == {"deleted_count": 0}
    assert immediate.json() == {"deleted_count": 1}


@pytest.mark.asyncio
async def test_negative_retention_rejected(client: AsyncClient):
    response = await client.post(
        "/admin/sessions/cleanup-revoked?retention_days=-1", headers=ADMIN_HEADERS
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_external_login(client: AsyncClient):
    response = await client.post(
        "/auth/external-login",
        json={"provider": "google", "email": "ext@acme.com", "email_verified": True},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["user"]["email_verified"] is True
    assert "refresh_token" not in response.json()


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
