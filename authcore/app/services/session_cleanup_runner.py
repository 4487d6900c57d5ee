"""Periodic session cleanup loop."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from authcore.app.services.auth_services import AuthServices
from authcore.app.services.unit_of_work import UnitOfWork
from authcore.app.use_cases.sessions import CleanupSessionsUseCase

SleepCallable = Callable[[float], Awaitable[None]]
UnitOfWorkFactory = Callable[[], UnitOfWork]
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupReport:
    expired_deleted: int
    revoked_deleted: int


class SessionCleanupRunner:
    """Runs expired and old-revoked session cleanup on a fixed interval."""

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        services: AuthServices,
        interval_seconds: float = 86400,
        retention_days: Optional[int] = None,
        sleep: Optional[SleepCallable] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._services = services
        self._interval_seconds = interval_seconds
        self._retention_days = retention_days
        self._sleep = sleep

    async def run_once(self) -> CleanupReport:
        """Run both cleanups once, each in its own unit of work."""
        expired = await CleanupSessionsUseCase(
            self._uow_factory(), self._services
        ).cleanup_expired()
        revoked = await CleanupSessionsUseCase(
            self._uow_factory(), self._services
        ).cleanup_old_revoked(self._retention_days)

        for name, result in (("expired", expired), ("old_revoked", revoked)):
            if result.is_err():
                logger.error(
                    "session_cleanup_failed kind=%s code=%s", name, result.error.code
                )

        report = CleanupReport(
            expired_deleted=expired.value.deleted_count if expired.is_ok() else 0,
            revoked_deleted=revoked.value.deleted_count if revoked.is_ok() else 0,
        )
        logger.info(
            "session_cleanup_done expired_deleted=%s revoked_deleted=%s",
            report.expired_deleted,
            report.revoked_deleted,
        )
        return report

    async def run_until_stopped(self, stop_event: asyncio.Event) -> None:
        """Repeat run_once every interval until stop_event is set."""

        while not stop_event.is_set():
            try:
                await self.run_once()
            except Exception:  # noqa: BLE001
                logger.exception("session_cleanup_pass_crashed")
            await self._wait(stop_event)

    async def _wait(self, stop_event: asyncio.Event) -> None:
        if self._sleep is not None:
            await self._sleep(self._interval_seconds)
            return
        # Wakes early when stop_event is set
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self._interval_seconds)
        except asyncio.TimeoutError:
            pass
