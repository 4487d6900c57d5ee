"""
Unit tests for ConfirmPasswordResetUseCase

Tests all business logic with mocked dependencies.
"""
import hashlib
from datetime import timedelta
from uuid import uuid4

import pytest

from authcore.app.use_cases.auth.confirm_password_reset_use_case import (
    ConfirmPasswordResetUseCase,
)
from authcore.domain.entities import PasswordResetToken, User


@pytest.fixture
def reset_fixture(mock_uow, clock):
    """Known user with an unused, unexpired token"""
    user_id = uuid4()
    plain_token = "reset_token_12345"
    user = User(
        id=user_id,
        email="user@example.com",
        password_hash="old_hashed_password",
        failed_login_attempts=3,
        locked_until=clock() + timedelta(minutes=5),
    )
    token = PasswordResetToken(
        id=uuid4(),
        user_id=user_id,
        token_hash=hashlib.sha256(plain_token.encode()).hexdigest(),
        used=False,
        expires_at=clock() + timedelta(minutes=30),
    )
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = token
    mock_uow.users.get_by_id.return_value = user
    mock_uow.sessions.revoke_all_by_user_id.return_value = 3
    return plain_token, user, token


@pytest.mark.asyncio
async def test_successful_password_reset_confirmation(mock_uow, services, clock, reset_fixture):
    """Token is consumed, credential rotated and every session revoked"""
    # Arrange
    plain_token, user, token = reset_fixture
    new_password = "NewSecurePass123!"

    use_case = ConfirmPasswordResetUseCase(mock_uow, services)

    # Act
    result = await use_case.execute(plain_token, new_password)

    # Assert
    assert result.is_ok()
    assert result.value.status == "success"

    # Verify token was looked up with correct hash
    mock_uow.password_reset_tokens.get_by_token_hash.assert_called_once_with(token.token_hash)
    mock_uow.password_reset_tokens.mark_used.assert_called_once_with(token.id)

    # Verify password rotated and lockout cleared
    mock_uow.users.update.assert_called_once()
    assert services.hasher.verify(new_password, user.password_hash)
    assert user.password_changed_at == clock()
    assert user.failed_login_attempts == 0
    assert user.locked_until is None

    # Verify all sessions were revoked
    mock_uow.sessions.revoke_all_by_user_id.assert_called_once_with(user.id, clock())

    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == "password_reset_confirmed"
    assert audit.event_metadata["sessions_revoked"] == 3
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_unknown_token_is_invalid(mock_uow, services):
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = None

    result = await ConfirmPasswordResetUseCase(mock_uow, services).execute(
        "nope", "NewSecurePass123!"
    )

    assert result.error.code == "TOKEN_INVALID"
    mock_uow.users.update.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_used_token_is_invalid(mock_uow, services, reset_fixture):
    plain_token, _, token = reset_fixture
    token.used = True

    result = await ConfirmPasswordResetUseCase(mock_uow, services).execute(
        plain_token, "NewSecurePass123!"
    )

    assert result.error.code == "TOKEN_INVALID"
    mock_uow.users.update.assert_not_called()


@pytest.mark.asyncio
async def test_expired_token_is_expired(mock_uow, services, clock, reset_fixture):
    plain_token, _, _ = reset_fixture
    clock.advance(timedelta(minutes=31))

    result = await ConfirmPasswordResetUseCase(mock_uow, services).execute(
        plain_token, "NewSecurePass123!"
    )

    assert result.error.code == "TOKEN_EXPIRED"
    mock_uow.sessions.revoke_all_by_user_id.assert_not_called()


@pytest.mark.asyncio
async def test_concurrently_consumed_token_is_invalid(mock_uow, services, reset_fixture):
    plain_token, _, _ = reset_fixture
    mock_uow.password_reset_tokens.mark_used.return_value = False

    result = await ConfirmPasswordResetUseCase(mock_uow, services).execute(
        plain_token, "NewSecurePass123!"
    )

    assert result.error.code == "TOKEN_INVALID"
    mock_uow.users.update.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_weak_password_rejected_before_lookup(mock_uow, services, reset_fixture):
    plain_token, _, _ = reset_fixture

    result = await ConfirmPasswordResetUseCase(mock_uow, services).execute(plain_token, "short")

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_called()
