"""
Logging configuration for Drishti Sentinel
"""
import logging
import sys
from typing import Optional

from drishti.config.settings import settings


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger instance

    Args:
        name: Name of the logger (typically __name__)
        level: Optional logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Falls back to LOG_LEVEL from settings.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Set level
    if level:
        logger.setLevel(getattr(logging, level.upper()))
    elif not logger.level:
        logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Only add handler if logger doesn't have any
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)

    return logger
