"""Logging utilities for the library agent."""

import logging
import sys

_LOGGER_NAME = "library_agent"


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance for the agent.

    Args:
        name: Optional sub-logger name. If None, returns the root agent logger.

    Returns:
        The requested logger.
    """
    if name:
        if name.startswith(f"{_LOGGER_NAME}."):
            return logging.getLogger(name)
        return logging.getLogger(f"{_LOGGER_NAME}.{name}")
    return logging.getLogger(_LOGGER_NAME)


def setup_logging(
    level: int = logging.INFO, format_str: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
) -> None:
    """Attach a stdout handler to the agent's root logger.

    Meant to be called by the hosting application or a standalone script,
    never by the agent itself.

    Args:
        level: Logging level.
        format_str: Log format string.
    """
    logger = logging.getLogger(_LOGGER_NAME)

    # Avoid adding multiple handlers if called multiple times
    if logger.handlers and not all(isinstance(h, logging.NullHandler) for h in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_str))
    logger.addHandler(handler)
    logger.setLevel(level)


logging.getLogger(_LOGGER_NAME).addHandler(logging.NullHandler())
