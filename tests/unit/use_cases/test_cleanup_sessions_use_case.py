from datetime import timedelta

import pytest

from authcore.adapter.memory.unit_of_work import InMemoryUnitOfWork
from authcore.app.use_cases.sessions import CleanupSessionsUseCase
from authcore.domain.entities import Session


@pytest.fixture
def add_session(store, seed_user, clock):
    owner = seed_user(email="a@x.com")
    counter = iter(range(1000))

    def _add_session(expires_in, revoked=False, updated_ago=timedelta(0)):
        n = next(counter)
        session = Session(
            user_id=owner.id,
            session_id=f"sid-{n}",
            refresh_token_hash=f"{n:064d}",
            revoked=revoked,
            expires_at=clock() + expires_in,
            created_at=clock() - updated_ago,
            updated_at=clock() - updated_ago,
        )
        store.sessions[session.id] = session
        return session

    return _add_session


@pytest.mark.asyncio
async def test_cleanup_expired_removes_exactly_the_expired_one(store, services, add_session):
    """One expired and one live session: only the expired one goes"""
    # Arrange
    expired = add_session(expires_in=-timedelta(minutes=1))
    live = add_session(expires_in=timedelta(days=1))

    # Act
    result = await CleanupSessionsUseCase(InMemoryUnitOfWork(store), services).cleanup_expired()

    # Assert
    assert result.value.deleted_count == 1
    assert expired.id not in store.sessions
    assert live.id in store.sessions


@pytest.mark.asyncio
async def test_cleanup_expired_is_idempotent(store, services, add_session):
    add_session(expires_in=-timedelta(minutes=1))

    first = await CleanupSessionsUseCase(InMemoryUnitOfWork(store), services).cleanup_expired()
    second = await CleanupSessionsUseCase(InMemoryUnitOfWork(store), services).cleanup_expired()

    assert first.value.deleted_count == 1
    assert second.value.deleted_count == 0


@pytest.mark.asyncio
async def test_cleanup_old_revoked_respects_retention(store, services, add_session):
    old = add_session(expires_in=timedelta(days=1), revoked=True, updated_ago=timedelta(days=31))
    recent = add_session(
        expires_in=timedelta(days=1), revoked=True, updated_ago=timedelta(days=2)
    )
    old_but_live = add_session(expires_in=timedelta(days=1), updated_ago=timedelta(days=40))

    result = await CleanupSessionsUseCase(
        InMemoryUnitOfWork(store), services
    ).cleanup_old_revoked(30)

    assert result.value.deleted_count == 1
    assert old.id not in store.sessions
    assert recent.id in store.sessions
    assert old_but_live.id in store.sessions


@pytest.mark.asyncio
async def test_cleanup_old_revoked_defaults_to_configured_retention(mock_uow, services, clock):
    await CleanupSessionsUseCase(mock_uow, services).cleanup_old_revoked()

    mock_uow.sessions.delete_revoked_before.assert_called_once_with(clock() - timedelta(days=30))
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_negative_retention_is_rejected(mock_uow, services):
    result = await CleanupSessionsUseCase(mock_uow, services).cleanup_old_revoked(-1)

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.sessions.delete_revoked_before.assert_not_called()


@pytest.mark.asyncio
async def test_cleanup_clears_links_to_deleted_sessions(store, services, add_session):
    expired = add_session(expires_in=-timedelta(minutes=1))
    successor = add_session(expires_in=timedelta(days=1))
    successor.previous_session_id = expired.id

    await CleanupSessionsUseCase(InMemoryUnitOfWork(store), services).cleanup_expired()

    assert store.sessions[successor.id].previous_session_id is None
