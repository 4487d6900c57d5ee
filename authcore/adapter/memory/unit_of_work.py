from authcore.adapter.memory.repositories import (
    MemoryAuditEventRepository,
    MemoryPasswordResetTokenRepository,
    MemorySessionRepository,
    MemoryUserRepository,
)
from authcore.adapter.memory.store import MemoryStore
from authcore.app.services.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """
    UnitOfWork over a MemoryStore.

    Holds the store lock for the whole block. Anything not committed when
    the block exits is rolled back to the last committed snapshot.
    """

    def __init__(self, store: MemoryStore):
        self.store = store
        self._snapshot = None

    async def __aenter__(self):
        await self.store.lock.acquire()
        self._snapshot = self.store.snapshot()
        self.users = MemoryUserRepository(self.store)
        self.sessions = MemorySessionRepository(self.store)
        self.audit_events = MemoryAuditEventRepository(self.store)
        self.password_reset_tokens = MemoryPasswordResetTokenRepository(self.store)
        return self

    async def __aexit__(self, *args):
        try:
            await self.rollback()
        finally:
            self._snapshot = None
            self.store.lock.release()

    async def commit(self):
        self._snapshot = self.store.snapshot()

    async def rollback(self):
        if self._snapshot is not None:
            self.store.restore(self._snapshot)
