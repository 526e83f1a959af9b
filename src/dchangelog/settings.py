"""Process-wide settings and environment loading."""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()
logger.debug("Environment variables loaded from .env if present")


@lru_cache(maxsize=1)
def get_log_level() -> str:
    """Return the configured log level name."""
    return os.getenv("LOG_LEVEL", "INFO").upper()
