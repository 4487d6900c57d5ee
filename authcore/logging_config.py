"""Process logging setup shared by the API and the cleanup worker."""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: str) -> None:
    normalized_level = level.strip().upper() if level and level.strip() else "INFO"
    resolved_level = getattr(logging, normalized_level, logging.INFO)

    logging.basicConfig(
        level=resolved_level,
        format=_LOG_FORMAT,
    )
