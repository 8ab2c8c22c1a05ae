"""
Logging utilities for guildbot.
Console output goes through Rich.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

CUSTOM_THEME = Theme({
    "logging.level.success": "green",
    "logging.level.command": "cyan",
    "logging.level.debug": "dim cyan",
})

console = Console(theme=CUSTOM_THEME)

# Level used when a logger is created without an explicit one
_default_level = logging.INFO


def set_default_level(level: int) -> None:
    """Change the level of existing guildbot loggers and of those created later."""
    global _default_level
    _default_level = level

    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("guildbot.") and isinstance(logger, logging.Logger):
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)


def setup_logging(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Set up a logger with RichHandler.

    Args:
        name: Logger name
        level: Logging level (default: module default, INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(f"guildbot.{name}")

    if level is None:
        level = _default_level

    logger.setLevel(level)
    logger.propagate = False

    # Re-running setup must not stack handlers
    logger.handlers = []

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="[%(name)s] %(message)s", datefmt="%H:%M:%S"))

    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return setup_logging(name)
