"""Logging configuration helpers."""
from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | {message}"
)


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default handler with a compact stderr sink."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
