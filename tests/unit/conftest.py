from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from authcore.adapter.memory.store import MemoryStore
from authcore.adapter.memory.unit_of_work import InMemoryUnitOfWork
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.auth_settings import AuthSettings
from authcore.domain.base import utc_now
from authcore.domain.entities import User, UserStatus
from tests.fixtures.credentials import PASSWORD


class MutableClock:
    """Naive-UTC clock that tests can move forward"""

    def __init__(self):
        self.now = utc_now()

    def __call__(self):
        return self.now

    def advance(self, delta: timedelta):
        self.now = self.now + delta


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.increment_failed_attempts = AsyncMock()
    uow.users.record_successful_login = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock()
    uow.sessions.find_by_refresh_token_hash = AsyncMock()
    uow.sessions.list_active_by_user_id = AsyncMock(return_value=[])
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.revoke_if_active = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_user_id = AsyncMock(return_value=0)
    uow.sessions.touch = AsyncMock()
    uow.sessions.delete_expired = AsyncMock(return_value=0)
    uow.sessions.delete_revoked_before = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()

    uow.password_reset_tokens = MagicMock()
    uow.password_reset_tokens.create = AsyncMock()
    uow.password_reset_tokens.get_by_token_hash = AsyncMock()
    uow.password_reset_tokens.mark_used = AsyncMock(return_value=True)

    return uow


@pytest.fixture
def settings():
    # Minimum bcrypt cost keeps the suite fast
    return AuthSettings(jwt_secret="unit-test-secret", bcrypt_rounds=4)


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def services(settings, clock):
    return AuthServices.build(settings, clock=clock)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def uow_factory(store):
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def make_user(services):
    def _make_user(
        email="a@x.com",
        password=PASSWORD,
        status=UserStatus.active,
        roles=None,
        **fields,
    ) -> User:
        return User(
            email=email,
            password_hash=services.hasher.hash(password),
            status=status,
            roles=roles if roles is not None else ["USER"],
            **fields,
        )

    return _make_user


@pytest.fixture
def seed_user(store, make_user):
    """Insert a user straight into the memory store"""

    def _seed_user(**kwargs) -> User:
        user = make_user(**kwargs)
        store.users[user.id] = user
        return user

    return _seed_user
