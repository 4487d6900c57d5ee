"""
Authentication Use Cases

All authentication-related business logic.
"""

from .change_password_use_case import ChangePasswordUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .dtos import (
    AuthResponse,
    ChangePasswordResponse,
    ConfirmPasswordResetResponse,
    ExternalProfile,
    LogoutResponse,
    RegisterCommand,
    RequestPasswordResetResponse,
)
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase
from .oauth_login_use_case import OAuthLoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .register_use_case import RegisterUseCase
from .request_password_reset_use_case import (
    RequestPasswordResetUseCase,
    ResetTokenSink,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "OAuthLoginUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "ResetTokenSink",
    # DTOs - Commands
    "RegisterCommand",
    "ExternalProfile",
    # DTOs - Responses
    "AuthResponse",
    "LogoutResponse",
    "ChangePasswordResponse",
    "RequestPasswordResetResponse",
    "ConfirmPasswordResetResponse",
]
