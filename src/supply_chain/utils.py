"""Logging helpers."""

import logging
import sys
from typing import Union


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(name: str = "supply_chain", level: Union[str, int] = logging.INFO) -> logging.Logger:
    """Configure a logger with a single stderr handler.

    Logs go to stderr because stdout carries the MCP stdio protocol when the
    server runs. Calling this again only changes the level.

    Args:
        name: Logger name ("supply_chain", "mcp", ...)
        level: Level name (case-insensitive) or number

    Returns:
        The configured logger

    Raises:
        ValueError: If the level name is unknown
    """
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(getattr(handler, "_supply_chain_handler", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._supply_chain_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
