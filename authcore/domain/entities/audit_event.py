"""
AuditEvent Entity

Immutable log of authentication and session events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from authcore.domain.base import utc_now


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - immutable log of authentication events.

    Business Rules:
    - Immutable (never updated or deleted)
    - user_id nullable for events without an identified principal
    - Metadata stores additional context (IP, user agent, counts, etc.)
    - Never stores raw tokens, token hashes or password hashes
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, index=True)

    action: str = Field(max_length=100)  # e.g., "login", "token_refresh"
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_user_action", "user_id", "action"),
    )
