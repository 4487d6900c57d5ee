"""
Revoke Sessions Use Case

Handles session revocation for security and session management.
"""

import logging
from typing import Optional
from uuid import UUID

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.domain.entities import AuditEvent
from authcore.libs.result import Result, Return

from ..errors import SESSION_NOT_FOUND, translate_store_errors
from .dtos import RevokeAllSessionsResponse, RevokeSessionResponse

logger = logging.getLogger(__name__)


class RevokeSessionsUseCase:
    """
    Use case for revoking sessions of a principal.

    Business Rules:
    - A principal can only revoke its own sessions
    - A session that is absent or owned by someone else yields NOT_FOUND,
      both cases look the same
    - Revoking an already revoked session is a no-op that still succeeds
    - Revocation is audit-logged
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def revoke_session(
        self, owner_id: UUID, session_record_id: UUID
    ) -> Result[RevokeSessionResponse]:
        """
        Revoke one session by its record ID.

        Args:
            owner_id: Principal requesting the revocation
            session_record_id: Session to revoke

        Returns:
            Result with revocation status, or Error
        """
        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_record_id)
            if session is None or session.user_id != owner_id:
                return Return.err(SESSION_NOT_FOUND)

            now = self.services.clock()
            revoked = await self.uow.sessions.revoke_if_active(session.id, now)
            if not revoked:
                return Return.ok(
                    RevokeSessionResponse(session_id=str(session.id), revoked=True)
                )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=owner_id,
                    action="revoke_session",
                    event_metadata={"session_id": str(session.id)},
                )
            )

            await self.uow.commit()

            logger.info("session_revoked user_id=%s session_id=%s", owner_id, session.id)

            return Return.ok(RevokeSessionResponse(session_id=str(session.id), revoked=True))

    @translate_store_errors
    async def revoke_all(
        self, owner_id: UUID, except_session_id: Optional[UUID] = None
    ) -> Result[RevokeAllSessionsResponse]:
        """
        Revoke every live session of a principal.

        Args:
            owner_id: Principal whose sessions will be revoked
            except_session_id: Optional session to keep (logout other devices)

        Returns:
            Result with count of revoked sessions, or Error
        """
        async with self.uow:
            if except_session_id is not None:
                kept = await self.uow.sessions.get_by_id(except_session_id)
                if kept is None or kept.user_id != owner_id:
                    return Return.err(SESSION_NOT_FOUND)

            now = self.services.clock()
            count = await self.uow.sessions.revoke_all_by_user_id(
                owner_id, now, except_session_id=except_session_id
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=owner_id,
                    action="revoke_all_sessions",
                    event_metadata={
                        "revoked_count": count,
                        "kept_session_id": str(except_session_id) if except_session_id else None,
                    },
                )
            )

            await self.uow.commit()

            logger.info("sessions_revoked user_id=%s count=%s", owner_id, count)

            return Return.ok(
                RevokeAllSessionsResponse(
                    revoked_count=count,
                    kept_session_id=str(except_session_id) if except_session_id else None,
                )
            )
