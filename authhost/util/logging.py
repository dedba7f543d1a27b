"""Stdlib logging setup.

Domain and application code logs through logfire; route modules and
scripts use stdlib loggers, configured here.
"""

import logging
import sys

from authhost.config import Settings

# Libraries that log every request or statement at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "alembic.runtime.migration")


def setup_logging(settings: Settings) -> None:
    """Configure the root logger from settings.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("authhost").setLevel(level)

    logging.getLogger(__name__).info(
        f"Logging configured: environment={settings.environment}, "
        f"level={logging.getLevelName(level)}"
    )
