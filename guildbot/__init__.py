"""
guildbot: command gating and dispatch for a Discord bot.
"""

__version__ = "1.0.0"
__description__ = "Discord bot command framework with cooldowns and permission checks"

from .bot.client import BotClient, create_bot, run_bot

__all__ = ["BotClient", "create_bot", "run_bot", "__version__"]
