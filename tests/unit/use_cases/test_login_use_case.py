import asyncio
from datetime import timedelta

import pytest

from authcore.adapter.memory.unit_of_work import InMemoryUnitOfWork
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.auth_settings import AuthSettings
from authcore.app.services.lockout_policy import LoginCounters
from authcore.app.use_cases.auth.login_use_case import LoginUseCase
from authcore.domain.entities import UserStatus
from tests.fixtures.credentials import PASSWORD


@pytest.mark.asyncio
async def test_successful_login(store, services, seed_user):
    """Valid credentials issue a token pair and a live session"""
    # Arrange
    user = seed_user(email="a@x.com")
    use_case = LoginUseCase(InMemoryUnitOfWork(store), services)

    # Act
    result = await use_case.execute(
        "a@x.com", PASSWORD, ip_address="10.0.0.1", user_agent="pytest"
    )

    # Assert
    assert result.is_ok()
    data = result.value
    assert data.user.email == "a@x.com"
    assert data.user.roles == ["USER"]
    assert data.access_token and data.refresh_token

    [session] = store.sessions.values()
    assert session.user_id == user.id
    assert session.ip_address == "10.0.0.1"
    assert session.refresh_token_hash == services.codec.hash_token(data.refresh_token)
    assert session.refresh_token_hash != data.refresh_token

    assert [e.action for e in store.audit_events.values()] == ["login"]


@pytest.mark.asyncio
async def test_login_response_never_contains_password_hash(store, services, seed_user):
    seed_user(email="a@x.com")

    result = await LoginUseCase(InMemoryUnitOfWork(store), services).execute("a@x.com", PASSWORD)

    assert "password_hash" not in result.value.user.model_dump()


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(store, services, seed_user):
    seed_user(email="a@x.com")

    result = await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
        "  A@X.COM ", PASSWORD
    )

    assert result.is_ok()


@pytest.mark.asyncio
async def test_login_invalid_credentials_wrong_password(store, services, seed_user):
    """Wrong password adds exactly one failed attempt"""
    user = seed_user(email="a@x.com")

    result = await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
        "a@x.com", "WrongPassword!"
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"
    assert store.users[user.id].failed_login_attempts == 1
    assert store.sessions == {}
    assert [e.action for e in store.audit_events.values()] == ["login_failed"]


@pytest.mark.asyncio
async def test_login_invalid_credentials_nonexistent_user(mock_uow, services):
    """Unknown email looks exactly like a wrong password"""
    mock_uow.users.get_by_email.return_value = None

    result = await LoginUseCase(mock_uow, services).execute("nobody@x.com", "SomePassword!")

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"
    mock_uow.users.increment_failed_attempts.assert_not_called()
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_malformed_input_never_touches_store(mock_uow, services):
    use_case = LoginUseCase(mock_uow, services)

    bad_email = await use_case.execute("not-an-email", PASSWORD)
    blank_password = await use_case.execute("a@x.com", "   ")

    assert bad_email.error.code == "VALIDATION_ERROR"
    assert blank_password.error.code == "VALIDATION_ERROR"
    mock_uow.users.get_by_email.assert_not_called()


@pytest.mark.asyncio
async def test_five_failures_then_locked(store, services, seed_user):
    """5th wrong password is INVALID_CREDENTIALS, 6th attempt is ACCOUNT_LOCKED"""
    # Arrange
    user = seed_user(email="a@x.com")

    # Act
    codes = []
    for _ in range(5):
        result = await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
            "a@x.com", "WrongPassword!"
        )
        codes.append(result.error.code)

    locked = await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
        "a@x.com", PASSWORD
    )

    # Assert
    assert codes == ["INVALID_CREDENTIALS"] * 5
    assert locked.error.code == "ACCOUNT_LOCKED"
    stored = store.users[user.id]
    assert stored.failed_login_attempts == 5
    assert stored.locked_until == services.clock() + timedelta(minutes=15)
    assert "account_locked" in [e.action for e in store.audit_events.values()]


@pytest.mark.asyncio
async def test_locked_account_rejected_before_password_check(
    store, services, seed_user, clock
):
    seed_user(email="a@x.com", locked_until=clock() + timedelta(minutes=5))

    result = await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
        "a@x.com", "WrongPassword!"
    )

    assert result.error.code == "ACCOUNT_LOCKED"
    # No counter change while locked
    assert all(u.failed_login_attempts == 0 for u in store.users.values())


@pytest.mark.asyncio
async def test_successful_login_after_lock_expires_resets_counters(
    store, services, seed_user, clock
):
    user = seed_user(
        email="a@x.com",
        failed_login_attempts=5,
        locked_until=clock() + timedelta(minutes=15),
    )
    clock.advance(timedelta(minutes=16))

    result = await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
        "a@x.com", PASSWORD
    )

    assert result.is_ok()
    stored = store.users[user.id]
    assert stored.failed_login_attempts == 0
    assert stored.locked_until is None
    assert stored.last_login_at == clock()


@pytest.mark.asyncio
async def test_successful_login_after_failures_resets_counters(store, services, seed_user):
    user = seed_user(email="a@x.com")
    for _ in range(3):
        await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
            "a@x.com", "WrongPassword!"
        )

    result = await LoginUseCase(InMemoryUnitOfWork(store), services).execute(
        "a@x.com", PASSWORD
    )

    assert result.is_ok()
    assert store.users[user.id].failed_login_attempts == 0


@pytest.mark.asyncio
async def test_concurrent_failures_lose_no_updates(store, seed_user, clock):
    """N concurrent wrong passwords add exactly N failed attempts"""
    services = AuthServices.build(
        AuthSettings(jwt_secret="unit-test-secret", bcrypt_rounds=4, lockout_max_attempts=100),
        clock=clock,
    )
    user = seed_user(email="a@x.com")
    attempts = 12

    results = await asyncio.gather(
        *(
            LoginUseCase(InMemoryUnitOfWork(store), services).execute(
                "a@x.com", "WrongPassword!"
            )
            for _ in range(attempts)
        )
    )

    assert all(r.error.code == "INVALID_CREDENTIALS" for r in results)
    assert store.users[user.id].failed_login_attempts == attempts


@pytest.mark.asyncio
async def test_login_inactive_user_revealed_only_after_password(store, services, seed_user):
    seed_user(email="a@x.com", status=UserStatus.disabled)
    use_case_wrong = LoginUseCase(InMemoryUnitOfWork(store), services)
    use_case_right = LoginUseCase(InMemoryUnitOfWork(store), services)

    wrong = await use_case_wrong.execute("a@x.com", "WrongPassword!")
    right = await use_case_right.execute("a@x.com", PASSWORD)

    assert wrong.error.code == "INVALID_CREDENTIALS"
    assert right.error.code == "ACCOUNT_INACTIVE"
    assert store.sessions == {}


@pytest.mark.asyncio
async def test_failed_attempt_records_audit_and_commits(mock_uow, services, make_user):
    """The failure counter survives even though the login fails"""
    user = make_user(email="a@x.com")
    mock_uow.users.get_by_email.return_value = user
    mock_uow.users.increment_failed_attempts.return_value = LoginCounters(
        failed_login_attempts=1, locked_until=None
    )

    result = await LoginUseCase(mock_uow, services).execute("a@x.com", "WrongPassword!")

    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.users.increment_failed_attempts.assert_called_once()
    args = mock_uow.users.increment_failed_attempts.call_args.args
    assert args[0] == user.id
    assert args[1] == 5
    mock_uow.commit.assert_called_once()
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_authenticate_returns_principal_without_session(store, services, seed_user):
    seed_user(email="a@x.com")

    result = await LoginUseCase(InMemoryUnitOfWork(store), services).authenticate(
        "a@x.com", PASSWORD
    )

    assert result.is_ok()
    assert result.value.email == "a@x.com"
    assert store.sessions == {}


@pytest.mark.asyncio
async def test_store_failure_becomes_store_error(mock_uow, services):
    from authcore.app.repositories.errors import StoreError

    mock_uow.users.get_by_email.side_effect = StoreError("connection refused")

    result = await LoginUseCase(mock_uow, services).execute("a@x.com", PASSWORD)

    assert result.is_err()
    assert result.error.code == "STORE_ERROR"
    assert "connection refused" not in result.error.message
