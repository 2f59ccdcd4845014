"""
logging.py — Log Setup for the Order Backend

Every module logs through `get_logger(__name__)`. `configure_logging` runs
once from main.py with `settings.LOG_LEVEL`.

Lines look like:
    2025-06-01 09:00:00,000 | WARNING | app.services.notifications | Mail is not configured; ...

The Sheets client talks to Google through requests, so urllib3 logs every
connection at DEBUG. Those loggers stay at WARNING unless the app itself
runs at DEBUG.
"""

import logging
from typing import Tuple

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

NOISY_LOGGERS: Tuple[str, ...] = ("urllib3", "requests", "jose")


def resolve_level(level: str) -> int:
    """Map a level name such as "debug" to its number. Unknown names fall back to INFO."""
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str = "INFO") -> int:
    """
    Set the root format and level, and quiet client-library loggers.

    Returns the numeric level in effect.
    """
    numeric = resolve_level(level)
    logging.basicConfig(level=numeric, format=LOG_FORMAT, force=True)

    library_level = numeric if numeric <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logging.getLogger(__name__).info("Logging at %s", logging.getLevelName(numeric))
    return numeric


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
