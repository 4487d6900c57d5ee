"""
Login Use Case

Verifies credentials under the lockout policy and issues a token pair.
"""

import logging
from typing import Optional

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.services.views import PrincipalView, to_principal_view
from authcore.domain.entities import AuditEvent, User
from authcore.libs.result import Result, Return

from ..errors import (
    ACCOUNT_INACTIVE,
    ACCOUNT_LOCKED,
    INVALID_CREDENTIALS,
    translate_store_errors,
)
from ..validation import validate_credentials_format
from .dtos import AuthResponse

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for credential authentication and token issuance.

    Business Rules:
    - Malformed input fails with VALIDATION_ERROR before any store access
    - Unknown email and wrong password both yield INVALID_CREDENTIALS, and
      an unknown email still pays for one bcrypt comparison
    - An active lock rejects with ACCOUNT_LOCKED before the hash comparison
    - A wrong password adds one failed attempt atomically; reaching the
      threshold locks the account
    - Account status is revealed only after the password verified
    - Success resets counters, clears the lock and stamps last_login_at
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def authenticate(self, email: str, password: str) -> Result[PrincipalView]:
        """
        Verify credentials without issuing tokens.

        Returns:
            Result with the sanitized principal, or Error
        """
        async with self.uow:
            result = await self._verify_credentials(email, password)
            if result.is_err():
                return result

            await self.uow.commit()
            return Return.ok(to_principal_view(result.value))

    @translate_store_errors
    async def execute(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[AuthResponse]:
        """
        Execute login use case.

        Args:
            email: Login identifier
            password: Plain text password
            ip_address: Client address, stored on the session
            user_agent: Client user agent, stored on the session

        Returns:
            Result with AuthResponse containing tokens and principal, or Error
        """
        async with self.uow:
            result = await self._verify_credentials(email, password)
            if result.is_err():
                return result
            user = result.value

            issued = await self.services.issuer.issue(
                self.uow, user, ip_address=ip_address, user_agent=user_agent
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="login",
                    event_metadata={
                        "session_id": str(issued.session.id),
                        "ip_address": ip_address,
                        "user_agent": user_agent,
                    },
                )
            )

            await self.uow.commit()

            logger.info("login_succeeded user_id=%s session_id=%s", user.id, issued.session.id)

            return Return.ok(
                AuthResponse(
                    access_token=issued.access_token,
                    refresh_token=issued.refresh_token,
                    session_id=str(issued.session.id),
                    user=to_principal_view(user),
                )
            )

    async def _verify_credentials(self, email: str, password: str) -> Result[User]:
        """
        Run the credential checks inside the caller's unit of work.

        Failure side effects (counter increments and their audit rows) are
        committed here; the success-side counter reset is left for the
        caller's commit.
        """
        format_check = validate_credentials_format(email, password)
        if format_check.is_err():
            return format_check
        normalized_email = format_check.value

        now = self.services.clock()
        lockout = self.services.lockout

        user = await self.uow.users.get_by_email(normalized_email)
        if user is None:
            self.services.hasher.burn(password)
            logger.info("login_failed reason=unknown_identifier")
            return Return.err(INVALID_CREDENTIALS)

        if lockout.is_locked(user.locked_until, now):
            logger.info("login_rejected_locked user_id=%s", user.id)
            return Return.err(ACCOUNT_LOCKED)

        if not self.services.hasher.verify(password, user.password_hash):
            counters = await self.uow.users.increment_failed_attempts(
                user.id, lockout.max_attempts, lockout.lock_expiry(now)
            )
            newly_locked = lockout.is_locked(counters.locked_until, now)
            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="account_locked" if newly_locked else "login_failed",
                    event_metadata={
                        "failed_attempts": counters.failed_login_attempts,
                        "locked_until": (
                            counters.locked_until.isoformat() if newly_locked else None
                        ),
                    },
                )
            )
            await self.uow.commit()

            if newly_locked:
                logger.warning(
                    "account_locked user_id=%s attempts=%s locked_until=%s",
                    user.id,
                    counters.failed_login_attempts,
                    counters.locked_until,
                )
            else:
                logger.info(
                    "login_failed user_id=%s attempts=%s",
                    user.id,
                    counters.failed_login_attempts,
                )
            return Return.err(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.info("login_rejected_inactive user_id=%s", user.id)
            return Return.err(ACCOUNT_INACTIVE)

        await self.uow.users.record_successful_login(user.id, now)
        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login_at = now

        return Return.ok(user)
