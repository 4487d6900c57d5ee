"""
Session Entity

One refresh-token lineage, bound to its owner.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from authcore.domain.base import utc_now


class Session(SQLModel, table=True):
    """
    Session entity - stores the hash of one issued refresh token.

    Business Rules:
    - refresh_token_hash is the SHA-256 hex digest of the full token string;
      the raw token is never persisted
    - session_id is the random claim embedded in the refresh JWT
    - revoked is monotonic: once True it never returns to False
    - previous_session_id links a rotated session to the one it replaced
    - expires_at is honored independently of the token's own expiry
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    session_id: str = Field(unique=True, max_length=64)
    refresh_token_hash: str = Field(unique=True, index=True, max_length=64)

    # Provenance (informational only)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    previous_session_id: Optional[UUID] = Field(
        default=None, foreign_key="sessions.id", ondelete="SET NULL"
    )

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    last_used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "revoked"),
        Index("idx_session_revoked_updated_at", "revoked", "updated_at"),
    )
