"""
Error taxonomy shared by all use cases.

Credential and token failures use fixed messages so that distinct internal
causes (unknown email vs wrong password, reuse vs forged token) look the
same to the caller.
"""

import functools
import logging
from enum import Enum

from authcore.app.repositories.errors import StoreError
from authcore.libs.result import Error, Return

logger = logging.getLogger(__name__)


class AuthErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"


def validation_error(message: str = "Invalid email or password format") -> Error:
    return Error(AuthErrorCode.VALIDATION_ERROR.value, message)


INVALID_CREDENTIALS = Error(
    AuthErrorCode.INVALID_CREDENTIALS.value, "Invalid email or password"
)
ACCOUNT_LOCKED = Error(
    AuthErrorCode.ACCOUNT_LOCKED.value, "Account is temporarily locked"
)
ACCOUNT_INACTIVE = Error(AuthErrorCode.ACCOUNT_INACTIVE.value, "Account is inactive")
TOKEN_EXPIRED = Error(AuthErrorCode.TOKEN_EXPIRED.value, "Token has expired")
TOKEN_INVALID = Error(AuthErrorCode.TOKEN_INVALID.value, "Invalid token")
EMAIL_CONFLICT = Error(AuthErrorCode.CONFLICT.value, "Email already registered")
SESSION_NOT_FOUND = Error(AuthErrorCode.NOT_FOUND.value, "Session not found")
USER_NOT_FOUND = Error(AuthErrorCode.NOT_FOUND.value, "User not found")
STORE_ERROR = Error(AuthErrorCode.STORE_ERROR.value, "Service temporarily unavailable")


def translate_store_errors(func):
    """
    Turn persistence failures escaping a use case into STORE_ERROR.

    Driver messages are logged, never returned.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except StoreError:
            logger.exception("store_error operation=%s", func.__qualname__)
            return Return.err(STORE_ERROR)

    return wrapper
