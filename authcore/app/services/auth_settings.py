"""
Auth Settings

Explicit configuration for the authentication core, built once at startup
and passed into constructors. Business logic never reads ApplicationConfig.
"""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field


class AuthSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    jwt_secret: str = Field(..., min_length=1)
    jwt_algorithm: str = "HS256"
    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=7)

    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    lockout_max_attempts: int = Field(default=5, ge=1)
    lockout_duration: timedelta = timedelta(minutes=15)

    default_role: str = "USER"
    revoked_session_retention_days: int = Field(default=30, ge=0)
    password_reset_ttl: timedelta = timedelta(hours=1)

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        """Build settings from an ApplicationConfig-style object"""
        return cls(
            jwt_secret=config.JWT_SECRET,
            jwt_algorithm=config.JWT_ALGORITHM,
            access_token_ttl=timedelta(minutes=int(config.ACCESS_TOKEN_EXPIRE_MINUTES)),
            refresh_token_ttl=timedelta(days=int(config.REFRESH_TOKEN_EXPIRE_DAYS)),
            bcrypt_rounds=int(config.BCRYPT_ROUNDS),
            lockout_max_attempts=int(config.LOCKOUT_MAX_ATTEMPTS),
            lockout_duration=timedelta(minutes=int(config.LOCKOUT_DURATION_MINUTES)),
            default_role=config.DEFAULT_ROLE,
            revoked_session_retention_days=int(config.REVOKED_SESSION_RETENTION_DAYS),
            password_reset_ttl=timedelta(minutes=int(config.PASSWORD_RESET_EXPIRE_MINUTES)),
        )
