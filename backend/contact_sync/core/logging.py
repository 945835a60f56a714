"""
Logging setup for the contact sync process.
"""

import logging
import sys
from typing import Optional

from contact_sync.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger with a single stdout handler.

    Safe to call more than once: existing handlers installed by a previous
    call are replaced instead of duplicated.

    Args:
        level: Log level name (e.g. "DEBUG", "INFO"). Defaults to LOG_LEVEL.
    """
    level = level or get_settings().log_level
    root = logging.getLogger()

    for handler in list(root.handlers):
        if getattr(handler, "_contact_sync", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._contact_sync = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    root.setLevel(level.upper())

    # httpx logs every request at INFO, which leaks query strings
    logging.getLogger("httpx").setLevel(logging.WARNING)
