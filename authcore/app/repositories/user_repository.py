from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from authcore.app.services.lockout_policy import LoginCounters
from authcore.domain.entities import User


class IUserRepository(ABC):
    """User (credential record) repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by normalized email address"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def increment_failed_attempts(
        self, user_id: UUID, max_attempts: int, lock_until: datetime
    ) -> LoginCounters:
        """
        Atomically add one failed attempt.

        When the new count reaches max_attempts, locked_until is moved to
        lock_until unless an existing lock already ends later.
        """
        pass

    @abstractmethod
    async def record_successful_login(self, user_id: UUID, now: datetime) -> None:
        """Reset counters, clear the lock and stamp last_login_at in one update"""
        pass
