"""
Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

from .enums import UserStatus

from .user import User
from .session import Session
from .audit_event import AuditEvent
from .password_reset_token import PasswordResetToken

__all__ = [
    # Enums
    "UserStatus",
    # Entities
    "User",
    "Session",
    "AuditEvent",
    "PasswordResetToken",
]
