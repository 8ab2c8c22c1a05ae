"""
Command Handler
Parses prefixed messages and slash interactions and runs the matching command
"""

from typing import Any, List, Optional, Tuple

import discord

from guildbot.commands.command import Command
from guildbot.commands.command_registry import CommandRegistry
from guildbot.commands.gate import Decision, Reject
from guildbot.utils.error_handler import ErrorHandler, get_error_handler
from guildbot.utils.logger import get_logger
from guildbot.utils.monitoring import Monitoring
from guildbot.utils.validation import ValidationUtils


class CommandHandler:
    """Routes incoming messages and interactions to registered commands."""

    def __init__(
        self,
        registry: CommandRegistry,
        prefix: str,
        monitoring: Optional[Monitoring] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.logger = get_logger("Command")
        self.registry = registry
        self.prefix = prefix
        self.monitoring = monitoring
        self.error_handler = error_handler if error_handler is not None else get_error_handler()

    def parse_command(self, content: str) -> Optional[Tuple[str, List[str]]]:
        """
        Split a message into invoke and arguments.

        Args:
            content: Raw message content

        Returns:
            (invoke, args) with invoke lowercased, or None when the message
            is not a command
        """
        content = ValidationUtils.sanitize_input(content)
        if not content.startswith(self.prefix):
            return None

        parts = content[len(self.prefix):].split()
        if not parts:
            return None

        return parts[0].lower(), parts[1:]

    async def handle(self, message: Any) -> Optional[Decision]:
        """
        Handle an incoming message.

        Args:
            message: Discord message object

        Returns:
            The gate decision, or None when no command ran
        """
        if message.author.bot:
            return None

        parsed = self.parse_command(message.content or "")
        if parsed is None:
            return None

        invoke, args = parsed
        command = self.registry.get(invoke)
        if not command or not command.policy.enabled:
            return None

        return await self._run(command, command.execute(message, args, invoke, self.prefix))

    async def handle_interaction(self, interaction: Any) -> Optional[Decision]:
        """
        Handle an application command interaction.

        Args:
            interaction: Discord interaction object

        Returns:
            The gate decision, or None when no command ran
        """
        if interaction.type != discord.InteractionType.application_command:
            return None

        name = (interaction.data or {}).get("name", "")
        command = self.registry.get(name)
        if not command or not command.policy.slash_command.enabled:
            return None

        return await self._run(command, command.execute_interaction(interaction))

    async def _run(self, command: Command, invocation: Any) -> Optional[Decision]:
        context = self.error_handler.command_context(command.name)
        if self.error_handler.is_circuit_broken(context):
            invocation.close()
            self.logger.warning(f"Skipping {command.name}, circuit breaker active")
            return None

        try:
            self.logger.debug(f"Executing: {command.name}")
            decision = await invocation
        except Exception as error:
            self.error_handler.handle_exception(error, context)
            if self.monitoring:
                self.monitoring.record_error()
            return None

        if self.monitoring:
            if isinstance(decision, Reject):
                self.monitoring.record_rejection(decision.reason.value)
            else:
                self.monitoring.record_command()
        return decision
