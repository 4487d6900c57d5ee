"""
Token Codec

Signs and verifies the two bearer token kinds:

- access: short-lived, stateless, verified by signature + expiry only
- refresh: longer-lived, carries a random session_id claim and a
  ``type: refresh`` marker; only valid together with its Session row

Pure: no I/O beyond the signing key.
"""

import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Tuple
from uuid import UUID, uuid4

from jose import JWTError, jwt

from authcore.domain.base import utc_now


class TokenType(str, Enum):
    access = "access"
    refresh = "refresh"


class TokenError(Exception):
    """Base class for token verification failures"""


class TokenExpiredError(TokenError):
    """Signature is valid but the token is past its exp claim"""


class TokenInvalidError(TokenError):
    """Bad signature, malformed token, or wrong token type"""


@dataclass(frozen=True)
class TokenClaims:
    subject: UUID
    token_type: TokenType
    roles: List[str] = field(default_factory=list)
    session_id: Optional[str] = None


class TokenCodec:
    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings, clock: Callable[[], datetime] = utc_now) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            access_ttl=settings.access_token_ttl,
            refresh_ttl=settings.refresh_token_ttl,
            clock=clock,
        )

    def encode_access(self, subject: UUID, roles: List[str]) -> str:
        """Create a stateless access token"""
        now = self._clock()
        payload = {
            "sub": str(subject),
            "roles": list(roles),
            "type": TokenType.access.value,
            "jti": uuid4().hex,
            "iat": now.replace(tzinfo=UTC),
            "exp": (now + self.access_ttl).replace(tzinfo=UTC),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def encode_refresh(
        self, subject: UUID, roles: List[str], session_id: str
    ) -> Tuple[str, datetime]:
        """
        Create a refresh token bound to session_id.

        Returns:
            (token, expires_at) - expires_at is naive UTC, for the Session row
        """
        now = self._clock()
        expires_at = now + self.refresh_ttl
        payload = {
            "sub": str(subject),
            "roles": list(roles),
            "session_id": session_id,
            "type": TokenType.refresh.value,
            "jti": uuid4().hex,
            "iat": now.replace(tzinfo=UTC),
            "exp": expires_at.replace(tzinfo=UTC),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm), expires_at

    def decode(self, token: str, expected_type: TokenType) -> TokenClaims:
        """
        Verify signature, expiry and token type. Expiry is judged against the
        codec clock, the same clock that stamped iat and exp.

        Raises:
            TokenExpiredError: token is past its exp claim
            TokenInvalidError: anything else is wrong with the token
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise TokenInvalidError("Invalid token") from exc

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise TokenInvalidError("Invalid exp claim")
        expires_at = datetime.fromtimestamp(exp, UTC).replace(tzinfo=None)
        if expires_at < self._clock():
            raise TokenExpiredError("Token has expired")

        if payload.get("type") != expected_type.value:
            raise TokenInvalidError("Unexpected token type")

        try:
            subject = UUID(payload["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenInvalidError("Invalid subject claim") from exc

        session_id = payload.get("session_id")
        if expected_type == TokenType.refresh and not session_id:
            raise TokenInvalidError("Missing session claim")

        roles = payload.get("roles") or []
        if not isinstance(roles, list):
            raise TokenInvalidError("Invalid roles claim")

        return TokenClaims(
            subject=subject,
            token_type=expected_type,
            roles=[str(role) for role in roles],
            session_id=session_id,
        )

    @staticmethod
    def hash_token(token: str) -> str:
        """Deterministic lookup key for a raw token string (SHA-256 hex)"""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)
