"""
Session Management Use Cases

Revocation, listing and cleanup of sessions.
"""

from .cleanup_sessions_use_case import CleanupSessionsUseCase
from .dtos import (
    CleanupResponse,
    RevokeAllSessionsResponse,
    RevokeSessionResponse,
    SessionListResponse,
)
from .list_sessions_use_case import ListSessionsUseCase
from .revoke_sessions_use_case import RevokeSessionsUseCase

__all__ = [
    "RevokeSessionsUseCase",
    "ListSessionsUseCase",
    "CleanupSessionsUseCase",
    "RevokeSessionResponse",
    "RevokeAllSessionsResponse",
    "SessionListResponse",
    "CleanupResponse",
]
