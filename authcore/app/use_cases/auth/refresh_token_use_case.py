"""
Refresh Token Use Case

Exchanges a refresh token for a new token pair (rotation) with reuse
detection.

Per attempt:

    PRESENTED -> HASH_LOOKUP -> NOT_FOUND                    (TOKEN_INVALID)
                             -> FOUND, revoked               (reuse: revoke all, TOKEN_INVALID)
                             -> FOUND, expired               (TOKEN_EXPIRED)
                             -> FOUND, owner inactive        (ACCOUNT_INACTIVE)
                             -> FOUND, bad signature/claims  (revoke session, TOKEN_INVALID)
                             -> FOUND, valid -> ROTATED      (new pair)
"""

import logging
import re
from datetime import datetime
from typing import Optional

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.token_codec import (
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
)
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.services.views import to_principal_view
from authcore.domain.entities import AuditEvent, Session
from authcore.libs.result import Result, Return

from ..errors import (
    ACCOUNT_INACTIVE,
    TOKEN_EXPIRED,
    TOKEN_INVALID,
    translate_store_errors,
)
from .dtos import AuthResponse

logger = logging.getLogger(__name__)

_BROWSER_PATTERN = re.compile(r"(Edge|Edg|Opera|OPR|Chrome|Firefox|Safari)")
_OS_PATTERN = re.compile(r"(Windows|Android|iPhone|iPad|iOS|Mac|Linux)")


def user_agent_family(user_agent: str) -> str:
    """Coarse browser-os label, e.g. ``Chrome-Windows``"""
    browser = _BROWSER_PATTERN.search(user_agent)
    os_name = _OS_PATTERN.search(user_agent)
    return f"{browser.group(0) if browser else ''}-{os_name.group(0) if os_name else ''}"


def is_suspicious_refresh(
    session: Session, ip_address: Optional[str], user_agent: Optional[str]
) -> bool:
    """True when the refresh comes from a different IP or device family"""
    ip_changed = bool(
        session.ip_address and ip_address and session.ip_address != ip_address
    )
    agent_changed = bool(
        session.user_agent
        and user_agent
        and user_agent_family(session.user_agent) != user_agent_family(user_agent)
    )
    return ip_changed or agent_changed


class RefreshTokenUseCase:
    """
    Use case for refresh token rotation.

    Business Rules:
    - Lookup is by SHA-256 hash of the presented token, never the raw token
    - A revoked session presented again is treated as token theft: every
      live session of the owner is revoked, caller sees TOKEN_INVALID
    - Session expiry and owner status are checked before the signature
    - Signature and claims are re-verified even after a store hit; a failure
      revokes the matched session
    - Revoking the old session and creating its successor happen in one
      transaction; the old session is flipped by compare-and-set so two
      concurrent rotations cannot both succeed
    - IP / user-agent drift is logged and audited, never blocked
    """

    def __init__(self, uow: UnitOfWork, services: AuthServices):
        self.uow = uow
        self.services = services

    @translate_store_errors
    async def execute(
        self,
        refresh_token: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[AuthResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: The refresh token to verify and rotate
            ip_address: Client address of this refresh request
            user_agent: Client user agent of this refresh request

        Returns:
            Result with AuthResponse containing the new pair, or Error
        """
        if not isinstance(refresh_token, str) or not refresh_token:
            return Return.err(TOKEN_INVALID)

        codec = self.services.codec
        token_hash = codec.hash_token(refresh_token)
        now = self.services.clock()

        async with self.uow:
            session = await self.uow.sessions.find_by_refresh_token_hash(token_hash)

            if session is None:
                logger.info("refresh_rejected reason=not_found")
                return Return.err(TOKEN_INVALID)

            if session.revoked:
                return await self._handle_reuse(session, now, ip_address, user_agent)

            if session.expires_at < now:
                logger.info("refresh_rejected reason=expired session_id=%s", session.id)
                return Return.err(TOKEN_EXPIRED)

            user = await self.uow.users.get_by_id(session.user_id)
            if user is None:
                logger.warning("refresh_rejected reason=owner_missing session_id=%s", session.id)
                return Return.err(TOKEN_INVALID)
            if not user.is_active:
                logger.info("refresh_rejected reason=inactive user_id=%s", user.id)
                return Return.err(ACCOUNT_INACTIVE)

            try:
                claims = codec.decode(refresh_token, TokenType.refresh)
            except TokenExpiredError:
                logger.info("refresh_rejected reason=token_expired session_id=%s", session.id)
                return Return.err(TOKEN_EXPIRED)
            except TokenInvalidError:
                return await self._fail_closed(session, now, "signature_invalid")

            if claims.session_id != session.session_id or claims.subject != session.user_id:
                return await self._fail_closed(session, now, "claims_mismatch")

            if is_suspicious_refresh(session, ip_address, user_agent):
                logger.warning(
                    "suspicious_refresh user_id=%s session_id=%s previous_ip=%s ip=%s",
                    user.id,
                    session.id,
                    session.ip_address,
                    ip_address,
                )
                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=user.id,
                        action="suspicious_refresh",
                        event_metadata={
                            "session_id": str(session.id),
                            "previous_ip_address": session.ip_address,
                            "ip_address": ip_address,
                            "previous_user_agent": session.user_agent,
                            "user_agent": user_agent,
                        },
                    )
                )

            if not await self.uow.sessions.revoke_if_active(session.id, now):
                # A concurrent rotation already consumed this token
                return await self._handle_reuse(session, now, ip_address, user_agent)
            await self.uow.sessions.touch(session.id, now)

            issued = await self.services.issuer.issue(
                self.uow,
                user,
                ip_address=ip_address,
                user_agent=user_agent,
                previous_session_id=session.id,
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="token_refresh",
                    event_metadata={
                        "previous_session_id": str(session.id),
                        "session_id": str(issued.session.id),
                    },
                )
            )

            await self.uow.commit()

            logger.info(
                "session_rotated user_id=%s previous_session_id=%s session_id=%s",
                user.id,
                session.id,
                issued.session.id,
            )

            return Return.ok(
                AuthResponse(
                    access_token=issued.access_token,
                    refresh_token=issued.refresh_token,
                    session_id=str(issued.session.id),
                    user=to_principal_view(user),
                )
            )

    async def _handle_reuse(
        self,
        session: Session,
        now: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> Result[AuthResponse]:
        revoked_count = await self.uow.sessions.revoke_all_by_user_id(session.user_id, now)
        await self.uow.audit_events.create(
            AuditEvent(
                user_id=session.user_id,
                action="refresh_token_reuse_detected",
                event_metadata={
                    "session_id": str(session.id),
                    "revoked_count": revoked_count,
                    "ip_address": ip_address,
                    "user_agent": user_agent,
                },
            )
        )
        await self.uow.commit()

        logger.warning(
            "refresh_token_reuse_detected user_id=%s session_id=%s revoked_count=%s",
            session.user_id,
            session.id,
            revoked_count,
        )
        return Return.err(TOKEN_INVALID)

    async def _fail_closed(
        self, session: Session, now: datetime, reason: str
    ) -> Result[AuthResponse]:
        await self.uow.sessions.revoke_if_active(session.id, now)
        await self.uow.commit()

        logger.warning(
            "refresh_rejected reason=%s session_id=%s revoked=true", reason, session.id
        )
        return Return.err(TOKEN_INVALID)
