"""
PasswordResetToken Entity

Single-use credential reset tokens.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from authcore.domain.base import utc_now


class PasswordResetToken(SQLModel, table=True):
    """
    PasswordResetToken entity - single-use credential reset tokens.

    Business Rules:
    - Token is stored as the SHA-256 hash of a secure random string
    - Single-use: marked as used after confirmation
    - Expires after PASSWORD_RESET_EXPIRE_MINUTES
    """

    __tablename__ = "password_reset_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(unique=True, max_length=64)  # SHA-256 output

    used: bool = Field(default=False)

    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_password_reset_expires_at", "expires_at"),)
