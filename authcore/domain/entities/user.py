"""
User Entity

The credential record: one authenticable principal.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from authcore.domain.base import utc_now
from .enums import UserStatus


class User(SQLModel, table=True):
    """
    User entity - the credential record of one principal.

    Business Rules:
    - Email is the login identifier, stored lower-cased and unique
    - Password stored as bcrypt hash, never leaves the store boundary
    - failed_login_attempts / locked_until only change through the lockout policy
    - password_changed_at is stamped on every credential rotation
    - Never hard-deleted while sessions reference it
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    status: UserStatus = Field(default=UserStatus.active)
    roles: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Profile
    display_name: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = Field(default=None, max_length=2048)
    email_verified: bool = Field(default=False)

    # Lockout counters
    failed_login_attempts: int = Field(default=0)
    locked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    password_changed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime)
    )

    __table_args__ = (Index("idx_user_status", "status"),)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active
