"""
Request Password Reset Use Case

Generates a single-use password reset token. Delivery of the token (email)
is outside this core and happens through the injected sink.
"""

import logging
import secrets
from typing import Callable, Optional
from uuid import UUID

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.domain.entities import AuditEvent, PasswordResetToken
from authcore.libs.result import Result, Return

from ..errors import translate_store_errors
from ..validation import normalize_email
from .dtos import RequestPasswordResetResponse

logger = logging.getLogger(__name__)

# Receives (user_id, email, raw_token) for delivery
ResetTokenSink = Callable[[UUID, str, str], None]


def log_reset_token_issued(user_id: UUID, email: str, token: str) -> None:
    logger.info("password_reset_token_issued user_id=%s", user_id)


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Generate a cryptographically secure token, store only its SHA-256 hash
    - Token expires after the configured reset window
    - Same response for known and unknown emails (no enumeration)
    - Inactive accounts get no token, with the same response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        services: AuthServices,
        sink: Optional[ResetTokenSink] = None,
    ):
        self.uow = uow
        self.services = services
        self.sink = sink or log_reset_token_issued

    @translate_store_errors
    async def execute(self, email: str) -> Result[RequestPasswordResetResponse]:
        response = RequestPasswordResetResponse(
            status="sent",
            message="If the email exists, a password reset link has been sent",
        )
        if not isinstance(email, str) or not email.strip():
            return Return.ok(response)

        normalized_email = normalize_email(email)

        async with self.uow:
            user = await self.uow.users.get_by_email(normalized_email)
            if user is None or not user.is_active:
                return Return.ok(response)

            user_id = user.id
            reset_token = secrets.token_urlsafe(32)
            now = self.services.clock()

            password_reset_token = PasswordResetToken(
                user_id=user.id,
                token_hash=self.services.codec.hash_token(reset_token),
                used=False,
                expires_at=now + self.services.settings.password_reset_ttl,
                created_at=now,
            )
            await self.uow.password_reset_tokens.create(password_reset_token)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_reset_requested",
                    event_metadata={"token_id": str(password_reset_token.id)},
                )
            )

            await self.uow.commit()

        self.sink(user_id, normalized_email, reset_token)

        return Return.ok(response)
