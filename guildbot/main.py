"""
Entry point for guildbot.
"""

import asyncio
import logging
import sys

from guildbot.bot.client import run_bot
from guildbot.bot.config import config
from guildbot.utils.logger import get_logger, set_default_level


def main() -> None:
    """Main entry point."""
    if config.DEBUG:
        set_default_level(logging.DEBUG)
    logger = get_logger("Main")

    try:
        logger.info("Starting guildbot...")
        asyncio.run(run_bot(config))
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
