from datetime import datetime
from typing import List, Optional
from uuid import UUID

from authcore.adapter.memory.store import MemoryStore, clone
from authcore.app.repositories.audit_event_repository import IAuditEventRepository
from authcore.app.repositories.errors import DuplicateRecordError
from authcore.app.repositories.password_reset_token_repository import (
    IPasswordResetTokenRepository,
)
from authcore.app.repositories.session_repository import ISessionRepository
from authcore.app.repositories.user_repository import IUserRepository
from authcore.app.services.lockout_policy import LoginCounters, next_failure_state
from authcore.domain.entities import AuditEvent, PasswordResetToken, Session, User


class MemoryUserRepository(IUserRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self.store.users.values():
            if user.email == email:
                return clone(user)
        return None

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        user = self.store.users.get(user_id)
        return clone(user) if user else None

    async def create(self, user: User) -> User:
        if user.id in self.store.users or any(
            existing.email == user.email for existing in self.store.users.values()
        ):
            raise DuplicateRecordError("users", "email")
        self.store.users[user.id] = clone(user)
        return user

    async def update(self, user: User) -> User:
        if user.id not in self.store.users:
            raise DuplicateRecordError("users", "id")
        self.store.users[user.id] = clone(user)
        return user

    async def increment_failed_attempts(
        self, user_id: UUID, max_attempts: int, lock_until: datetime
    ) -> LoginCounters:
        stored = clone(self.store.users[user_id])
        counters = next_failure_state(
            stored.failed_login_attempts, stored.locked_until, max_attempts, lock_until
        )
        stored.failed_login_attempts = counters.failed_login_attempts
        stored.locked_until = counters.locked_until
        self.store.users[user_id] = stored
        return counters

    async def record_successful_login(self, user_id: UUID, now: datetime) -> None:
        stored = clone(self.store.users[user_id])
        stored.failed_login_attempts = 0
        stored.locked_until = None
        stored.last_login_at = now
        stored.updated_at = now
        self.store.users[user_id] = stored


class MemorySessionRepository(ISessionRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        session = self.store.sessions.get(session_id)
        return clone(session) if session else None

    async def find_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        for session in self.store.sessions.values():
            if session.refresh_token_hash == token_hash:
                return clone(session)
        return None

    async def list_active_by_user_id(self, user_id: UUID, now: datetime) -> List[Session]:
        sessions = [
            clone(s)
            for s in self.store.sessions.values()
            if s.user_id == user_id and not s.revoked and s.expires_at > now
        ]
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)

    async def create(self, session: Session) -> Session:
        if session.id in self.store.sessions or any(
            existing.refresh_token_hash == session.refresh_token_hash
            or existing.session_id == session.session_id
            for existing in self.store.sessions.values()
        ):
            raise DuplicateRecordError("sessions", "refresh_token_hash")
        self.store.sessions[session.id] = clone(session)
        return session

    def _revoke(self, session: Session, now: datetime) -> None:
        stored = clone(session)
        stored.revoked = True
        stored.revoked_at = now
        stored.updated_at = now
        self.store.sessions[stored.id] = stored

    async def revoke_if_active(self, session_id: UUID, now: datetime) -> bool:
        session = self.store.sessions.get(session_id)
        if session is None or session.revoked:
            return False
        self._revoke(session, now)
        return True

    async def revoke_all_by_user_id(
        self, user_id: UUID, now: datetime, except_session_id: Optional[UUID] = None
    ) -> int:
        targets = [
            s
            for s in self.store.sessions.values()
            if s.user_id == user_id and not s.revoked and s.id != except_session_id
        ]
        for session in targets:
            self._revoke(session, now)
        return len(targets)

    async def touch(self, session_id: UUID, now: datetime) -> None:
        session = self.store.sessions.get(session_id)
        if session is None:
            return
        stored = clone(session)
        stored.last_used_at = now
        self.store.sessions[session_id] = stored

    def _delete(self, session_ids: List[UUID]) -> int:
        for session_id in session_ids:
            del self.store.sessions[session_id]
        # ON DELETE SET NULL on previous_session_id
        gone = set(session_ids)
        for session in list(self.store.sessions.values()):
            if session.previous_session_id in gone:
                stored = clone(session)
                stored.previous_session_id = None
                self.store.sessions[stored.id] = stored
        return len(session_ids)

    async def delete_expired(self, now: datetime) -> int:
        return self._delete(
            [s.id for s in self.store.sessions.values() if s.expires_at < now]
        )

    async def delete_revoked_before(self, cutoff: datetime) -> int:
        return self._delete(
            [
                s.id
                for s in self.store.sessions.values()
                if s.revoked and s.updated_at < cutoff
            ]
        )


class MemoryAuditEventRepository(IAuditEventRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        self.store.audit_events[audit_event.id] = clone(audit_event)
        return audit_event


class MemoryPasswordResetTokenRepository(IPasswordResetTokenRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        if any(
            existing.token_hash == token.token_hash
            for existing in self.store.password_reset_tokens.values()
        ):
            raise DuplicateRecordError("password_reset_tokens", "token_hash")
        self.store.password_reset_tokens[token.id] = clone(token)
        return token

    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        for token in self.store.password_reset_tokens.values():
            if token.token_hash == token_hash:
                return clone(token)
        return None

    async def mark_used(self, token_id: UUID) -> bool:
        token = self.store.password_reset_tokens.get(token_id)
        if token is None or token.used:
            return False
        stored = clone(token)
        stored.used = True
        self.store.password_reset_tokens[token_id] = stored
        return True
