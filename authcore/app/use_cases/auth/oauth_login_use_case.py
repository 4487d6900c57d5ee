"""
OAuth Login Use Case

Signs in a principal from a verified external identity profile.
"""

import logging
import secrets
from typing import Optional

from authcore.app.repositories.errors import DuplicateRecordError
from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.services.views import to_principal_view
from authcore.domain.entities import AuditEvent, User, UserStatus
from authcore.libs.result import Result, Return

from ..errors import ACCOUNT_INACTIVE, INVALID_CREDENTIALS, translate_store_errors
from ..validation import normalize_email
from .dtos import AuthResponse, ExternalProfile

logger = logging.getLogger(__name__)


class OAuthLoginUseCase:
    """
    Use case for external identity login.

    Business Rules:
    - The provider handshake already happened; the profile is trusted
    - A profile without an email is rejected
    - Unknown email: create an active principal with the default role and a
      random password nobody knows
    - Known email: mark email verified, refresh avatar, stamp last_login_at
    - Inactive principals are rejected
    - Issues a token pair exactly like password login
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def execute(
        self,
        profile: ExternalProfile,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[AuthResponse]:
        if not profile.email:
            logger.info("oauth_login_rejected reason=no_email provider=%s", profile.provider)
            return Return.err(INVALID_CREDENTIALS)

        email = normalize_email(profile.email)
        now = self.services.clock()

        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            created = user is None

            if created:
                display_name = " ".join(
                    part for part in (profile.first_name, profile.last_name) if part
                )
                user = User(
                    email=email,
                    password_hash=self.services.hasher.hash(secrets.token_urlsafe(32)),
                    status=UserStatus.active,
                    roles=[self.services.settings.default_role],
                    display_name=display_name or None,
                    first_name=profile.first_name,
                    last_name=profile.last_name,
                    avatar_url=profile.picture,
                    email_verified=profile.email_verified,
                    last_login_at=now,
                    created_at=now,
                    updated_at=now,
                )
                try:
                    user = await self.uow.users.create(user)
                except DuplicateRecordError:
                    return Return.err(INVALID_CREDENTIALS)
            else:
                if not user.is_active:
                    logger.info("oauth_login_rejected reason=inactive user_id=%s", user.id)
                    return Return.err(ACCOUNT_INACTIVE)

                user.email_verified = True
                if profile.picture:
                    user.avatar_url = profile.picture
                if not user.first_name and profile.first_name:
                    user.first_name = profile.first_name
                if not user.last_name and profile.last_name:
                    user.last_name = profile.last_name
                user.last_login_at = now
                user.updated_at = now
                user = await self.uow.users.update(user)

            issued = await self.services.issuer.issue(
                self.uow, user, ip_address=ip_address, user_agent=user_agent
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="oauth_login",
                    event_metadata={
                        "provider": profile.provider,
                        "created": created,
                        "session_id": str(issued.session.id),
                    },
                )
            )

            await self.uow.commit()

            logger.info(
                "oauth_login user_id=%s provider=%s created=%s",
                user.id,
                profile.provider,
                created,
            )

            return Return.ok(
                AuthResponse(
                    access_token=issued.access_token,
                    refresh_token=issued.refresh_token,
                    session_id=str(issued.session.id),
                    user=to_principal_view(user),
                )
            )
