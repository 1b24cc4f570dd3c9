"""Logging utilities."""
import logging
import sys

from config import LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level(level_name: str) -> int:
    """Map a level name such as "debug" to its logging constant (INFO if unknown)."""
    return getattr(logging, level_name.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Create and configure a logger instance.

    Every engine component, repository and route module gets its logger here so
    the whole service shares one stdout format and the LOG_LEVEL setting.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logging.Logger instance
    """
    logger = logging.getLogger(name)
    level = _resolve_level(LOG_LEVEL)
    logger.setLevel(level)

    # Avoid adding multiple handlers if logger already configured
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)

    return logger
