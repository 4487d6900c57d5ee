from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from authcore.app.repositories.errors import DuplicateRecordError
from authcore.app.repositories.session_repository import ISessionRepository
from authcore.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """
        Find session by the SHA-256 hash of its refresh token.

        Indexed equality lookup. Revoked and expired rows are returned too so
        the caller can tell reuse from expiry.
        """
        stmt = (
            select(Session)
            .where(Session.refresh_token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_active_by_user_id(self, user_id: UUID, now: datetime) -> List[Session]:
        """Get all live sessions for a user"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.revoked == False,  # noqa: E712
                Session.expires_at > now,
            )
            .order_by(Session.created_at.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateRecordError("sessions", "refresh_token_hash") from exc
        await self.session.refresh(session_obj)
        return session_obj

    async def revoke_if_active(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session by ID (compare-and-set on revoked)"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now, updated_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_user_id(
        self, user_id: UUID, now: datetime, except_session_id: Optional[UUID] = None
    ) -> int:
        """Revoke all active sessions for a user"""
        conditions = [Session.user_id == user_id, Session.revoked == False]  # noqa: E712
        if except_session_id is not None:
            conditions.append(Session.id != except_session_id)

        stmt = (
            update(Session)
            .where(*conditions)
            .values(revoked=True, revoked_at=now, updated_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def touch(self, session_id: UUID, now: datetime) -> None:
        stmt = update(Session).where(Session.id == session_id).values(last_used_at=now)
        await self.session.execute(stmt)
        await self.session.flush()

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(Session).where(Session.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_revoked_before(self, cutoff: datetime) -> int:
        stmt = delete(Session).where(
            Session.revoked == True,  # noqa: E712
            Session.updated_at < cutoff,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
