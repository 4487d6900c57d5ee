"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the auth domain.
"""

from typing import Optional

from pydantic import BaseModel

from authcore.app.services.views import PrincipalView


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Registration intent, created by the API layer after request validation"""

    email: str
    password: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ExternalProfile(BaseModel):
    """
    Verified profile yielded by an identity-provider adapter.

    The provider handshake happens outside this core; only its result
    arrives here.
    """

    provider: str
    email: Optional[str] = None
    email_verified: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    picture: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class AuthResponse(BaseModel):
    """Token pair plus sanitized principal (login, register, refresh, oauth)"""

    access_token: str
    refresh_token: str
    session_id: str
    user: PrincipalView


class LogoutResponse(BaseModel):
    status: str
    message: str


class ChangePasswordResponse(BaseModel):
    status: str
    message: str
    sessions_revoked: int


class RequestPasswordResetResponse(BaseModel):
    status: str
    message: str


class ConfirmPasswordResetResponse(BaseModel):
    status: str
    message: str
