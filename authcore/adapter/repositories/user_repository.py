from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, case, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from authcore.app.repositories.errors import DuplicateRecordError
from authcore.app.repositories.user_repository import IUserRepository
from authcore.app.services.lockout_policy import LoginCounters
from authcore.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateRecordError("users", "email") from exc
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def increment_failed_attempts(
        self, user_id: UUID, max_attempts: int, lock_until: datetime
    ) -> LoginCounters:
        """
        Single UPDATE so concurrent failures cannot lose increments.

        The row lock taken by the UPDATE serializes writers; the CASE keeps
        a later existing lock in place.
        """
        new_attempts = User.failed_login_attempts + 1
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                failed_login_attempts=new_attempts,
                locked_until=case(
                    (
                        and_(
                            new_attempts >= max_attempts,
                            or_(
                                User.locked_until.is_(None),
                                User.locked_until < lock_until,
                            ),
                        ),
                        lock_until,
                    ),
                    else_=User.locked_until,
                ),
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

        counters = await self.session.exec(
            select(User.failed_login_attempts, User.locked_until).where(User.id == user_id)
        )
        failed_login_attempts, locked_until = counters.one()
        return LoginCounters(
            failed_login_attempts=failed_login_attempts, locked_until=locked_until
        )

    async def record_successful_login(self, user_id: UUID, now: datetime) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                failed_login_attempts=0,
                locked_until=None,
                last_login_at=now,
                updated_at=now,
            )
        )
        await self.session.execute(stmt)
        await self.session.flush()
