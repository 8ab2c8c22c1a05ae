"""
Utility modules for guildbot.
"""

from .logger import get_logger, set_default_level, setup_logging
from .discord import DiscordHost, DiscordUtils, PERMISSION_NAMES
from .validation import ValidationUtils, ValidationResult
from .monitoring import Monitoring, HealthStatus
from .error_handler import ErrorHandler, get_error_handler, setup_error_handler

__all__ = [
    "get_logger",
    "setup_logging",
    "set_default_level",
    "DiscordHost",
    "DiscordUtils",
    "PERMISSION_NAMES",
    "ValidationUtils",
    "ValidationResult",
    "Monitoring",
    "HealthStatus",
    "ErrorHandler",
    "get_error_handler",
    "setup_error_handler",
]
