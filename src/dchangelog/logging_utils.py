"""Logging configuration utilities for dchangelog."""

import logging
from typing import Optional

from .settings import get_log_level

_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure application-wide logging once."""
    if logging.getLogger().handlers:
        return

    log_level = level or get_log_level()
    logging.basicConfig(level=log_level.upper(), format=_LOG_FORMAT)
