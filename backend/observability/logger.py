"""
Logger configuration.

Provides configured root logger with ISO timestamps and correlation ID injection.

Dependencies: logging (stdlib), backend.configs
System role: Centralized logging configuration
"""

import logging
import sys

from backend.configs import get_settings
from backend.observability.correlation import get_correlation_id


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation ID to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


def configure_logging(level: str | None = None) -> None:
    """
    Configure Python logging with ISO timestamp and structured format.

    Args:
        level: Root level override (defaults to settings.log_level)
    """
    settings = get_settings()
    observability = settings.observability

    # Remove any existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        logging.Formatter(
            observability.log_format + " [cid=%(correlation_id)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel((level or settings.log_level).upper())
    root_logger.addHandler(handler)

    # Reduce noise from verbose third-party libraries
    for name in observability.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
