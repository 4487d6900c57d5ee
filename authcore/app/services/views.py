"""
Safe views of store records.

Every record read from a store and handed past the use-case boundary goes
through one of these mappings, so password and token hashes never escape.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from authcore.domain.entities import Session, User


class PrincipalView(BaseModel):
    """Sanitized principal - never includes the password hash"""

    id: str
    email: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    roles: List[str]
    is_active: bool
    email_verified: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime


class SessionView(BaseModel):
    """Sanitized session - never includes the refresh token hash"""

    id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    previous_session_id: Optional[str] = None
    created_at: datetime
    last_used_at: Optional[datetime] = None
    expires_at: datetime
    revoked: bool


def to_principal_view(user: User) -> PrincipalView:
    return PrincipalView(
        id=str(user.id),
        email=user.email,
        display_name=user.display_name,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar_url=user.avatar_url,
        roles=list(user.roles or []),
        is_active=user.is_active,
        email_verified=user.email_verified,
        last_login_at=user.last_login_at,
        created_at=user.created_at,
    )


def to_session_view(session: Session) -> SessionView:
    return SessionView(
        id=str(session.id),
        ip_address=session.ip_address,
        user_agent=session.user_agent,
        previous_session_id=(
            str(session.previous_session_id) if session.previous_session_id else None
        ),
        created_at=session.created_at,
        last_used_at=session.last_used_at,
        expires_at=session.expires_at,
        revoked=session.revoked,
    )
