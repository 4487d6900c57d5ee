"""Session cleanup worker entrypoint."""

import asyncio
import logging
import signal

from authcore.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from authcore.app.services.session_cleanup_runner import SessionCleanupRunner
from authcore.depends import AsyncSessionLocal, auth_services, init_db
from authcore.logging_config import configure_logging
from config import ApplicationConfig

logger = logging.getLogger(__name__)


def build_cleanup_runner() -> SessionCleanupRunner:
    return SessionCleanupRunner(
        uow_factory=lambda: SqlAlchemyUnitOfWork(AsyncSessionLocal()),
        services=auth_services,
        interval_seconds=float(ApplicationConfig.CLEANUP_INTERVAL_SECONDS),
        retention_days=int(ApplicationConfig.REVOKED_SESSION_RETENTION_DAYS),
    )


async def _run_worker() -> None:
    configure_logging(level=ApplicationConfig.LOG_LEVEL)
    logger.info(
        "cleanup_worker_starting interval_seconds=%s retention_days=%s",
        ApplicationConfig.CLEANUP_INTERVAL_SECONDS,
        ApplicationConfig.REVOKED_SESSION_RETENTION_DAYS,
    )

    await init_db()
    runner = build_cleanup_runner()
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await runner.run_until_stopped(stop_event)
    logger.info("cleanup_worker_stopped")


def main() -> None:
    """Run the periodic session cleanup loop until SIGINT/SIGTERM."""

    asyncio.run(_run_worker())


if __name__ == "__main__":
    main()
