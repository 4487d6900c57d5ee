from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from authcore.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by store-assigned ID"""
        pass

    @abstractmethod
    async def find_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """
        Find session by the SHA-256 hash of its refresh token.

        Revoked and expired sessions are returned too; the caller decides.
        """
        pass

    @abstractmethod
    async def list_active_by_user_id(
        self, user_id: UUID, now: datetime
    ) -> List[Session]:
        """Non-revoked, non-expired sessions for a user, newest first"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def revoke_if_active(self, session_id: UUID, now: datetime) -> bool:
        """
        Revoke one session if it is not revoked yet.

        Returns False when the session is missing or was already revoked,
        so of two concurrent callers only one observes True.
        """
        pass

    @abstractmethod
    async def revoke_all_by_user_id(
        self, user_id: UUID, now: datetime, except_session_id: Optional[UUID] = None
    ) -> int:
        """Revoke every non-revoked session for a user. Returns count revoked."""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, now: datetime) -> None:
        """Stamp last_used_at"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Hard-delete sessions whose expires_at has passed. Returns count."""
        pass

    @abstractmethod
    async def delete_revoked_before(self, cutoff: datetime) -> int:
        """Hard-delete revoked sessions last updated before cutoff. Returns count."""
        pass
