from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from authcore.domain.entities import PasswordResetToken


class IPasswordResetTokenRepository(ABC):
    """PasswordResetToken repository interface - application layer"""

    @abstractmethod
    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Create a new password reset token"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get token by its SHA-256 hash"""
        pass

    @abstractmethod
    async def mark_used(self, token_id: UUID) -> bool:
        """Mark an unused token as used. Returns False if it was already used."""
        pass
