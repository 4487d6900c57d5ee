from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from authcore.adapter.repositories.audit_event_repository import AuditEventRepository
from authcore.adapter.repositories.password_reset_token_repository import PasswordResetTokenRepository
from authcore.adapter.repositories.session_repository import SessionRepository
from authcore.adapter.repositories.user_repository import UserRepository
from authcore.app.repositories.errors import StoreError
from authcore.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        self.password_reset_tokens = PasswordResetTokenRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.rollback()
        # Driver errors never leave the adapter layer
        if exc is not None and isinstance(exc, SQLAlchemyError):
            raise StoreError(str(exc.__class__.__name__)) from exc

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
