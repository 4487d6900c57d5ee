from datetime import timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient

from authcore.app.services.token_codec import TokenCodec
from authcore.domain.base import utc_now
from authcore.domain.entities import PasswordResetToken
from tests.fixtures.http import bearer


async def _plant_reset_token(db_session, user_id, token="reset-token-value", **fields):
    record = PasswordResetToken(
        user_id=UUID(user_id),
        token_hash=TokenCodec.hash_token(token),
        expires_at=fields.pop("expires_at", utc_now() + timedelta(hours=1)),
        **fields,
    )
    db_session.add(record)
    await db_session.commit()
    return token


@pytest.mark.asyncio
async def test_request_reset_does_not_reveal_existence(client: AsyncClient, register):
    await register(email="user@acme.com")

    known = await client.post("/auth/password-reset/request", json={"email": "user@acme.com"})
    unknown = await client.post(
        "/auth/password-reset/request", json={"email": "nobody@acme.com"}
    )

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()


@pytest.mark.asyncio
async def test_confirm_reset_changes_password_and_revokes_sessions(
    client: AsyncClient, register, db_session
):
    tokens = await register(email="user@acme.com", password="SecurePass123")
    token = await _plant_reset_token(db_session, tokens["user"]["id"])

    response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": "BrandNewPass456"},
    )
    assert response.status_code == 200

    old = await client.post(
        "/auth/login", json={"email": "user@acme.com", "password": "SecurePass123"}
    )
    new = await client.post(
        "/auth/login", json={"email": "user@acme.com", "password": "BrandNewPass456"}
    )
    assert old.status_code == 401
    assert new.status_code == 200

    refresh = await client.post(
        "/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
    )
    assert refresh.status_code == 401

    replay = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": "AnotherPass789"},
    )
    assert replay.status_code == 401
    assert replay.json()["error"]["code"] == "TOKEN_INVALID"


@pytest.mark.asyncio
async def test_confirm_expired_reset_token(client: AsyncClient, register, db_session):
    tokens = await register()
    token = await _plant_reset_token(
        db_session, tokens["user"]["id"], expires_at=utc_now() - timedelta(minutes=1)
    )

    response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": "BrandNewPass456"},
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, register):
    tokens = await register(password="SecurePass123")

    wrong = await client.post(
        "/auth/change-password",
        json={"current_password": "WrongPass123", "new_password": "BrandNewPass456"},
        headers=bearer(tokens["access_token"]),
    )
    assert wrong.status_code == 401

    response = await client.post(
        "/auth/change-password",
        json={"current_password": "SecurePass123", "new_password": "BrandNewPass456"},
        headers=bearer(tokens["access_token"]),
    )

    assert response.status_code == 200
    assert response.json()["sessions_revoked"] == 1
