"""
Cleanup Sessions Use Case

Hard-deletes sessions that can no longer authenticate anything.
"""

import logging
from datetime import timedelta
from typing import Optional

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.libs.result import Result, Return

from ..errors import translate_store_errors, validation_error
from .dtos import CleanupResponse

logger = logging.getLogger(__name__)


class CleanupSessionsUseCase:
    """
    Use case for scheduled session cleanup.

    Business Rules:
    - Expired sessions are deleted regardless of revocation state
    - Revoked sessions are kept for the retention window, for incident review
    - Both operations are idempotent and safe next to live rotations
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def cleanup_expired(self) -> Result[CleanupResponse]:
        async with self.uow:
            count = await self.uow.sessions.delete_expired(self.services.clock())
            await self.uow.commit()

        logger.info("expired_sessions_deleted count=%s", count)
        return Return.ok(CleanupResponse(deleted_count=count))

    @translate_store_errors
    async def cleanup_old_revoked(
        self, retention_days: Optional[int] = None
    ) -> Result[CleanupResponse]:
        if retention_days is None:
            retention_days = self.services.settings.revoked_session_retention_days
        if retention_days < 0:
            return Return.err(validation_error("retention_days must not be negative"))

        cutoff = self.services.clock() - timedelta(days=retention_days)

        async with self.uow:
            count = await self.uow.sessions.delete_revoked_before(cutoff)
            await self.uow.commit()

        logger.info(
            "revoked_sessions_deleted count=%s retention_days=%s", count, retention_days
        )
        return Return.ok(CleanupResponse(deleted_count=count))
