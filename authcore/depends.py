from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from authcore.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from authcore.api.error import ClientError
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.auth_settings import AuthSettings
from authcore.app.services.token_codec import (
    TokenClaims,
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
)
from authcore.app.use_cases.errors import TOKEN_EXPIRED, TOKEN_INVALID
from config import ApplicationConfig


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite leaves foreign keys (and ON DELETE SET NULL) off per connection"""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)
enable_sqlite_foreign_keys(engine)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

auth_services = AuthServices.build(AuthSettings.from_config(ApplicationConfig))

security = HTTPBearer(auto_error=False)


def get_auth_services() -> AuthServices:
    return auth_services


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    services: AuthServices = Depends(get_auth_services),
) -> TokenClaims:
    """
    Dependency to extract and verify the access token from Authorization header.

    Refresh tokens are rejected here: the type claim must be ``access``.

    Returns:
        Verified claims (subject, roles)

    Raises:
        ClientError: 401 if token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(TOKEN_INVALID, status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        return services.codec.decode(credentials.credentials, TokenType.access)
    except TokenExpiredError:
        raise ClientError(TOKEN_EXPIRED, status_code=status.HTTP_401_UNAUTHORIZED)
    except TokenInvalidError:
        raise ClientError(TOKEN_INVALID, status_code=status.HTTP_401_UNAUTHORIZED)


async def init_db() -> None:
    """Create missing tables"""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
