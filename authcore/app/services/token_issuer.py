"""
Token Issuer

Mints an access/refresh pair and persists the Session row for the refresh
token. Shared by login, registration, external-identity login and rotation.
The caller owns the unit of work and its commit.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from authcore.app.services.token_codec import TokenCodec
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.domain.base import utc_now
from authcore.domain.entities import Session, User


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    session: Session


class TokenIssuer:
    def __init__(self, codec: TokenCodec, clock: Callable[[], datetime] = utc_now):
        self.codec = codec
        self._clock = clock

    async def issue(
        self,
        uow: UnitOfWork,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        previous_session_id: Optional[UUID] = None,
    ) -> IssuedTokens:
        roles = list(user.roles or [])
        session_id = self.codec.new_session_id()

        access_token = self.codec.encode_access(user.id, roles)
        refresh_token, expires_at = self.codec.encode_refresh(user.id, roles, session_id)

        now = self._clock()
        session = Session(
            user_id=user.id,
            session_id=session_id,
            refresh_token_hash=self.codec.hash_token(refresh_token),
            ip_address=ip_address,
            user_agent=user_agent,
            previous_session_id=previous_session_id,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )
        session = await uow.sessions.create(session)

        return IssuedTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            session=session,
        )
