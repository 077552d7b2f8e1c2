"""
Logging configuration for the application.

Sets up one stdout handler with a consistent format for the API, the
custody fee job and the calculators. Logging must not change program
behavior. Never logs sensitive data (request bodies, secrets, raw payloads).
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = (
    "uvicorn.access",
    "apscheduler.scheduler",
    "apscheduler.executors.default",
    "sqlalchemy.engine",
)


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
    """
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    # In DEBUG keep everything, SQL included
    if resolved > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
