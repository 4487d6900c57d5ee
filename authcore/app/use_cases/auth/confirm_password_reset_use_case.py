"""
Confirm Password Reset Use Case

Consumes a password reset token and rotates the credential.
"""

import logging

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.domain.entities import AuditEvent
from authcore.libs.result import Result, Return

from ..errors import TOKEN_EXPIRED, TOKEN_INVALID, translate_store_errors
from ..validation import validate_new_password
from .change_password_use_case import rotate_credential
from .dtos import ConfirmPasswordResetResponse

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token is looked up by its SHA-256 hash
    - Unknown or already used token: TOKEN_INVALID
    - Expired token: TOKEN_EXPIRED
    - New password must be at least 8 characters
    - Credential rotation revokes every session of the principal
    - Token is marked used in the same transaction
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def execute(
        self, token: str, new_password: str
    ) -> Result[ConfirmPasswordResetResponse]:
        strength_check = validate_new_password(new_password)
        if strength_check.is_err():
            return strength_check

        if not isinstance(token, str) or not token:
            return Return.err(TOKEN_INVALID)

        token_hash = self.services.codec.hash_token(token)
        now = self.services.clock()

        async with self.uow:
            reset_token = await self.uow.password_reset_tokens.get_by_token_hash(token_hash)
            if reset_token is None or reset_token.used:
                return Return.err(TOKEN_INVALID)

            if reset_token.expires_at < now:
                return Return.err(TOKEN_EXPIRED)

            user = await self.uow.users.get_by_id(reset_token.user_id)
            if user is None:
                return Return.err(TOKEN_INVALID)

            if not await self.uow.password_reset_tokens.mark_used(reset_token.id):
                # Consumed concurrently
                return Return.err(TOKEN_INVALID)

            revoked_count = await rotate_credential(
                self.uow, self.services, user, new_password, now
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_reset_confirmed",
                    event_metadata={
                        "token_id": str(reset_token.id),
                        "sessions_revoked": revoked_count,
                    },
                )
            )

            await self.uow.commit()

            logger.info(
                "password_reset_confirmed user_id=%s sessions_revoked=%s",
                user.id,
                revoked_count,
            )

            return Return.ok(
                ConfirmPasswordResetResponse(
                    status="success",
                    message="Password has been reset successfully",
                )
            )
