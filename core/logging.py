"""
Logging configuration for the API process and the CLI scripts
"""

import logging
import sys
from typing import Optional
from core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Loggers of this service; they follow LOG_LEVEL
SERVICE_LOGGERS = ("api", "core", "reporting", "__main__")

# Third-party loggers kept at WARNING whatever LOG_LEVEL says
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "apscheduler", "asyncpg")


def setup_logging(level: Optional[str] = None):
    """
    Route every log record to stdout.

    The root logger stays at WARNING so library chatter is dropped; the
    service packages (and a script run as ``__main__``) log at ``level``,
    defaulting to LOG_LEVEL.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    for name in SERVICE_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {level_name} for {', '.join(SERVICE_LOGGERS)}")
    return log_level
