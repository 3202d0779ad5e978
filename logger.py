"""
PHOTO ALIGN - Logging Setup

Configures the shared loguru logger. Library modules import ``logger`` from
loguru directly; hosts (the CLI, a GUI) call ``setup_logging`` once at startup.
"""

import os
import sys
from typing import Optional

from loguru import logger

LOG_LEVEL_ENV = "PHOTO_ALIGN_LOG_LEVEL"
DEFAULT_LEVEL = "INFO"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | <level>{message}</level>"
)


def resolve_level(level: Optional[str] = None) -> str:
    """Pick the log level: explicit argument, then environment, then INFO."""
    if level:
        return level.upper()
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL).upper()


def setup_logging(level: Optional[str] = None) -> int:
    """
    Replace loguru's default handler with a single console sink.

    Args:
        level: Minimum level to emit. Falls back to $PHOTO_ALIGN_LOG_LEVEL.

    Returns:
        The loguru handler id of the console sink.
    """
    logger.remove()  # Drop the default handler

    # No stderr in windowed builds
    if sys.stderr is None:
        return -1

    return logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=resolve_level(level),
        colorize=True,
    )
