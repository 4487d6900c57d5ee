"""
In-memory store

Dict-backed tables guarded by one asyncio.Lock. A unit of work holds the
lock from enter to exit, so transactions are serialized the way a
single-writer database would serialize them.

Records are copied on every read and write; nothing handed to a caller is
ever the object held in a table.
"""

import asyncio
from typing import Dict, TypeVar
from uuid import UUID

from sqlmodel import SQLModel

from authcore.domain.entities import AuditEvent, PasswordResetToken, Session, User

RecordT = TypeVar("RecordT", bound=SQLModel)


def clone(record: RecordT) -> RecordT:
    return type(record).model_validate(record.model_dump())


class MemoryStore:
    def __init__(self) -> None:
        self.users: Dict[UUID, User] = {}
        self.sessions: Dict[UUID, Session] = {}
        self.audit_events: Dict[UUID, AuditEvent] = {}
        self.password_reset_tokens: Dict[UUID, PasswordResetToken] = {}
        self.lock = asyncio.Lock()

    def snapshot(self) -> dict:
        # Stored records are replaced, never mutated, so shallow copies suffice
        return {
            "users": dict(self.users),
            "sessions": dict(self.sessions),
            "audit_events": dict(self.audit_events),
            "password_reset_tokens": dict(self.password_reset_tokens),
        }

    def restore(self, snapshot: dict) -> None:
        self.users = dict(snapshot["users"])
        self.sessions = dict(snapshot["sessions"])
        self.audit_events = dict(snapshot["audit_events"])
        self.password_reset_tokens = dict(snapshot["password_reset_tokens"])
