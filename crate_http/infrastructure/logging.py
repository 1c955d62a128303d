from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"


def log_level() -> int:
    """Level named by CRATE_LOG_LEVEL; unknown names mean INFO."""
    level = logging.getLevelName(os.getenv("CRATE_LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    # a root handler installed by the host application wins
    if not logging.getLogger().handlers:
        logging.basicConfig(level=log_level(), format=LOG_FORMAT)
    return logging.getLogger(name)
