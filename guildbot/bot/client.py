"""
Discord bot client setup using discord.py.
"""

import importlib
import time
from typing import Any, Dict, List, Optional

import discord

from guildbot.bot.config import Config, config as default_config
from guildbot.bot.keep_alive import run_server, update_bot_status
from guildbot.commands.command import Command
from guildbot.commands.command_handler import CommandHandler
from guildbot.commands.command_registry import CommandRegistry
from guildbot.commands.gate import CommandGate
from guildbot.repositories.cooldown_repository import CooldownRepository
from guildbot.utils.discord import DiscordHost
from guildbot.utils.error_handler import setup_error_handler
from guildbot.utils.logger import get_logger
from guildbot.utils.monitoring import Monitoring

logger = get_logger("Client")


class BotClient(discord.Client):
    """Discord client that owns the command registry and cooldown state."""

    def __init__(self, config: Config, cooldowns: Optional[CooldownRepository] = None):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)

        self.config = config
        self.start_time: Optional[float] = None

        # One cooldown table for every command, lives as long as the client
        self.cooldowns = cooldowns if cooldowns is not None else CooldownRepository()
        self.gate = CommandGate(self.cooldowns, DiscordHost(), config.OWNER_IDS)
        self.registry = CommandRegistry()
        self.monitoring = Monitoring(self)
        self.command_handler = CommandHandler(self.registry, config.PREFIX, self.monitoring)

    def add_command(self, command: Command) -> Command:
        """Register a command built for this client."""
        self.registry.register(command)
        return command

    def load_extension(self, module_path: str) -> None:
        """
        Import a module and call its setup(client) to register commands.

        Args:
            module_path: Dotted module path

        Raises:
            ImportError: If the module cannot be imported
            AttributeError: If the module has no setup function
        """
        module = importlib.import_module(module_path)
        setup = getattr(module, "setup", None)
        if not callable(setup):
            raise AttributeError(f"{module_path} has no setup(client) function")
        setup(self)
        logger.info(f"Loaded extension: {module_path}")

    def slash_command_payload(self) -> List[Dict[str, Any]]:
        """Application command definitions for every slash-enabled command."""
        return [
            {
                "name": cmd.name,
                "description": cmd.description or "No description",
                "type": 1,
                "options": [dict(option) for option in cmd.policy.slash_command.options],
            }
            for cmd in self.registry.get_slash_commands()
        ]

    async def setup_hook(self) -> None:
        """Called when the client is starting up."""
        logger.info("Setting up bot...")

        for module_path in self.config.COMMAND_MODULES:
            self.load_extension(module_path)

        payload = self.slash_command_payload()
        if payload:
            await self.http.bulk_upsert_global_commands(self.application_id, payload)
            logger.info(f"Synced {len(payload)} slash commands")

        logger.info(f"Registered {len(self.registry.get_all())} commands")

    async def on_ready(self) -> None:
        self.start_time = time.time()
        update_bot_status(status="ready", discord_connected=True, commands=len(self.registry.get_all()))

        logger.info(f"Logged in as: {self.user}")
        logger.info(f"Use {self.config.PREFIX}<command> to run commands")

    async def on_message(self, message: discord.Message) -> None:
        self.monitoring.record_message()
        await self.command_handler.handle(message)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        await self.command_handler.handle_interaction(interaction)

    async def close(self) -> None:
        """Clean shutdown."""
        if self.is_closed():
            return
        logger.info("Shutting down bot...")
        update_bot_status(status="offline", discord_connected=False)
        await super().close()


def create_bot(config: Optional[Config] = None) -> BotClient:
    """Create and return bot instance."""
    return BotClient(config or default_config)


async def run_bot(config: Optional[Config] = None) -> None:
    """Run the bot until it is closed."""
    config = config or default_config
    config.validate()

    bot = create_bot(config)
    setup_error_handler(on_shutdown=bot.close)

    try:
        await run_server(config)
        async with bot:
            await bot.start(config.DISCORD_TOKEN)
    except Exception as e:
        logger.error(f"Bot error: {e}")
        raise
