from abc import ABC, abstractmethod

from authcore.app.repositories.audit_event_repository import IAuditEventRepository
from authcore.app.repositories.password_reset_token_repository import IPasswordResetTokenRepository
from authcore.app.repositories.session_repository import ISessionRepository
from authcore.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    sessions: ISessionRepository
    audit_events: IAuditEventRepository
    password_reset_tokens: IPasswordResetTokenRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
