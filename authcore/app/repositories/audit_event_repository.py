from abc import ABC, abstractmethod

from authcore.domain.entities import AuditEvent


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        pass
