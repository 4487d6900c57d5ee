"""
Logout Use Case

Revokes the session behind a refresh token.
"""

import logging
from typing import Optional

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.domain.entities import AuditEvent
from authcore.libs.result import Result, Return

from ..errors import translate_store_errors
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for single-session logout.

    Business Rules:
    - Always succeeds with the same response, whether or not the token
      matched a session (no existence leak)
    - Only a live session is revoked; a revoked one is left untouched
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def execute(self, refresh_token: Optional[str]) -> Result[LogoutResponse]:
        response = LogoutResponse(status="success", message="Logged out successfully")
        if not refresh_token:
            return Return.ok(response)

        token_hash = self.services.codec.hash_token(refresh_token)
        now = self.services.clock()

        async with self.uow:
            session = await self.uow.sessions.find_by_refresh_token_hash(token_hash)
            if session is None or session.revoked:
                return Return.ok(response)

            await self.uow.sessions.revoke_if_active(session.id, now)
            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=session.user_id,
                    action="logout",
                    event_metadata={"session_id": str(session.id)},
                )
            )
            await self.uow.commit()

            logger.info("logout user_id=%s session_id=%s", session.user_id, session.id)

            return Return.ok(response)
