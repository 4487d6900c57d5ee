"""
Auth Services

The collaborators every auth use case needs, wired once from AuthSettings.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from authcore.app.services.auth_settings import AuthSettings
from authcore.app.services.lockout_policy import LockoutPolicy
from authcore.app.services.password_hasher import PasswordHasher
from authcore.app.services.token_codec import TokenCodec
from authcore.app.services.token_issuer import TokenIssuer
from authcore.domain.base import utc_now


@dataclass(frozen=True)
class AuthServices:
    settings: AuthSettings
    hasher: PasswordHasher
    codec: TokenCodec
    lockout: LockoutPolicy
    issuer: TokenIssuer
    clock: Callable[[], datetime] = utc_now

    @classmethod
    def build(
        cls, settings: AuthSettings, clock: Callable[[], datetime] = utc_now
    ) -> "AuthServices":
        codec = TokenCodec.from_settings(settings, clock=clock)
        return cls(
            settings=settings,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            codec=codec,
            lockout=LockoutPolicy.from_settings(settings),
            issuer=TokenIssuer(codec, clock=clock),
            clock=clock,
        )
