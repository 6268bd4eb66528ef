"""Logging configuration for StockLens."""

import logging
import sys

from stocklens.config import setting

DEFAULT_LEVEL = setting("app.log_level", "INFO")

# httpx logs every request at INFO; provider modules already log each attempt
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logger(name: str = "stocklens", level: str = DEFAULT_LEVEL) -> logging.Logger:
    """Create and configure a named logger writing to stderr."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(name)-20s | %(levelname)-7s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return logger
