"""
Change Password Use Case

Rotates the credential of an authenticated principal.
"""

import logging
from datetime import datetime
from uuid import UUID

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.domain.entities import AuditEvent, User
from authcore.libs.result import Result, Return

from ..errors import (
    ACCOUNT_INACTIVE,
    ACCOUNT_LOCKED,
    INVALID_CREDENTIALS,
    USER_NOT_FOUND,
    translate_store_errors,
)
from ..validation import validate_new_password
from .dtos import ChangePasswordResponse

logger = logging.getLogger(__name__)


async def rotate_credential(
    uow: UnitOfWork,
    services: AuthServices,
    user: User,
    new_password: str,
    now: datetime,
) -> int:
    """
    Replace the password hash and cut off every existing session.

    Stamps password_changed_at and clears lockout counters. Returns the
    number of sessions revoked. The caller commits.
    """
    user.password_hash = services.hasher.hash(new_password)
    user.password_changed_at = now
    user.failed_login_attempts = 0
    user.locked_until = None
    user.updated_at = now
    await uow.users.update(user)

    return await uow.sessions.revoke_all_by_user_id(user.id, now)


class ChangePasswordUseCase:
    """
    Use case for changing the password of the current principal.

    Business Rules:
    - A locked account is rejected with ACCOUNT_LOCKED before the hash check
    - Current password must verify (INVALID_CREDENTIALS otherwise); a wrong
      one counts as a failed attempt under the lockout policy
    - New password must be at least 8 characters
    - Every session of the principal is revoked, including the current one
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def execute(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> Result[ChangePasswordResponse]:
        strength_check = validate_new_password(new_password)
        if strength_check.is_err():
            return strength_check

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(USER_NOT_FOUND)

            now = self.services.clock()
            lockout = self.services.lockout

            if lockout.is_locked(user.locked_until, now):
                logger.info("password_change_rejected_locked user_id=%s", user.id)
                return Return.err(ACCOUNT_LOCKED)

            if not self.services.hasher.verify(current_password or "", user.password_hash):
                counters = await self.uow.users.increment_failed_attempts(
                    user.id, lockout.max_attempts, lockout.lock_expiry(now)
                )
                newly_locked = lockout.is_locked(counters.locked_until, now)
                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=user.id,
                        action="account_locked" if newly_locked else "password_change_failed",
                        event_metadata={"failed_attempts": counters.failed_login_attempts},
                    )
                )
                await self.uow.commit()

                logger.info(
                    "password_change_failed user_id=%s attempts=%s locked=%s",
                    user.id,
                    counters.failed_login_attempts,
                    newly_locked,
                )
                return Return.err(INVALID_CREDENTIALS)

            if not user.is_active:
                return Return.err(ACCOUNT_INACTIVE)

            revoked_count = await rotate_credential(
                self.uow, self.services, user, new_password, now
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_changed",
                    event_metadata={"sessions_revoked": revoked_count},
                )
            )

            await self.uow.commit()

            logger.info("password_changed user_id=%s sessions_revoked=%s", user.id, revoked_count)

            return Return.ok(
                ChangePasswordResponse(
                    status="success",
                    message="Password has been changed",
                    sessions_revoked=revoked_count,
                )
            )
