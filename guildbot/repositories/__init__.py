"""
State repositories for guildbot.
"""

from .cooldown_repository import CooldownRepository

__all__ = [
    "CooldownRepository",
]
