"""Input checks applied before any store access."""

import re

from authcore.libs.result import Result, Return

from .errors import validation_error

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_credentials_format(email: str, password: str) -> Result[str]:
    """
    Check that email is address-shaped and password is non-blank.

    Returns:
        Result with the normalized email, or VALIDATION_ERROR that does not
        say which of the two was wrong
    """
    if not isinstance(email, str) or not isinstance(password, str):
        return Return.err(validation_error())
    normalized = normalize_email(email)
    if not _EMAIL_PATTERN.match(normalized) or not password.strip():
        return Return.err(validation_error())
    return Return.ok(normalized)


def validate_new_password(password: str) -> Result[None]:
    if not isinstance(password, str) or len(password.strip()) < MIN_PASSWORD_LENGTH:
        return Return.err(
            validation_error(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        )
    return Return.ok(None)
