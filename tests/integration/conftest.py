import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from authcore.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.auth_settings import AuthSettings
from authcore.depends import (
    enable_sqlite_foreign_keys,
    get_auth_services,
    get_unit_of_work,
)
from tests.fixtures.http import auth_tokens


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def auth_services():
    return AuthServices.build(AuthSettings(jwt_secret="integration-secret", bcrypt_rounds=4))


@pytest_asyncio.fixture
async def client(db_session, auth_services):
    from authcore.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_auth_services] = lambda: auth_services

    # https so the Secure refresh cookie round-trips
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as ac:
        yield ac


@pytest.fixture
def register(client):
    async def _register(email="user@acme.com", password="SecurePass123"):
        response = await client.post(
            "/auth/register", json={"email": email, "password": password}
        )
        assert response.status_code == 201
        return auth_tokens(response)

    return _register
