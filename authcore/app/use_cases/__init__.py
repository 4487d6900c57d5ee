"""
Use Cases

Organized into domain folders:
- auth/: Authentication flows
- sessions/: Session revocation, listing and cleanup
- users/: Principal lookups
"""

from .auth import (
    ChangePasswordUseCase,
    ConfirmPasswordResetUseCase,
    LoginUseCase,
    LogoutUseCase,
    OAuthLoginUseCase,
    RefreshTokenUseCase,
    RegisterUseCase,
    RequestPasswordResetUseCase,
)
from .sessions import (
    CleanupSessionsUseCase,
    ListSessionsUseCase,
    RevokeSessionsUseCase,
)
from .users import LoadContextUseCase

__all__ = [
    # Auth
    "RegisterUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "OAuthLoginUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    # Sessions
    "RevokeSessionsUseCase",
    "ListSessionsUseCase",
    "CleanupSessionsUseCase",
    # Users
    "LoadContextUseCase",
]
