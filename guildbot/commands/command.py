"""
Command
A policy, its optional handlers, and the gate that guards them
"""

from typing import Any, Awaitable, Callable, List, Optional

import discord

from guildbot.bot.config import EMBED_COLORS
from guildbot.commands.gate import CommandGate, Decision, InvocationContext, Reject, RejectReason
from guildbot.commands.policy import CommandPolicy, PolicyError
from guildbot.commands.usage import build_usage
from guildbot.utils.discord import DiscordUtils

MessageHandler = Callable[["Command", Any, List[str], str, str], Awaitable[None]]
InteractionHandler = Callable[["Command", Any], Awaitable[None]]


class CommandNotImplementedError(NotImplementedError):
    """An enabled invocation variant has no handler."""


class Command:
    """
    Registered command.

    Handlers are either passed to the constructor or provided by overriding
    message_run() / interaction_run() in a subclass.
    """

    def __init__(
        self,
        client: Any,
        data: Any,
        message_handler: Optional[MessageHandler] = None,
        interaction_handler: Optional[InteractionHandler] = None,
    ):
        self.policy = self.validate_info(client, data)
        self.client = client
        self._message_handler = message_handler
        self._interaction_handler = interaction_handler

    @staticmethod
    def validate_info(client: Any, data: Any) -> CommandPolicy:
        """
        Validate constructor arguments.

        Returns:
            The policy, built from data when data is a mapping

        Raises:
            PolicyError: If the client is missing or data is malformed
        """
        if client is None:
            raise PolicyError("A client must be specified.")
        if isinstance(data, CommandPolicy):
            return data
        return CommandPolicy.from_data(data)

    @property
    def name(self) -> str:
        return self.policy.name

    @property
    def description(self) -> str:
        return self.policy.description

    @property
    def gate(self) -> CommandGate:
        return self.client.gate

    def implements_messages(self) -> bool:
        return self._message_handler is not None or type(self).message_run is not Command.message_run

    def implements_interactions(self) -> bool:
        return self._interaction_handler is not None or type(self).interaction_run is not Command.interaction_run

    async def message_run(self, message: Any, args: List[str], invoke: str, prefix: str) -> None:
        """Called when the command is sent as a message."""
        if self._message_handler is not None:
            await self._message_handler(self, message, args, invoke, prefix)
        elif self.policy.enabled:
            raise CommandNotImplementedError(f"{self.name} doesn't have a message handler.")

    async def interaction_run(self, interaction: Any) -> None:
        """Called when the command is used as a slash command."""
        if self._interaction_handler is not None:
            await self._interaction_handler(self, interaction)
        elif self.policy.slash_command.enabled:
            raise CommandNotImplementedError(f"{self.name} doesn't have an interaction handler.")

    async def execute(self, message: Any, args: List[str], invoke: str, prefix: str) -> Decision:
        """
        Gate a message invocation and run the handler when allowed.

        Returns:
            The gate decision
        """
        context = InvocationContext.from_message(message, args, invoke, prefix)
        decision = self.gate.evaluate(self.policy, context)

        if isinstance(decision, Reject):
            await self._present_rejection(message, decision, prefix, invoke)
            return decision

        try:
            await self.message_run(message, args, invoke, prefix)
        finally:
            self.gate.record_use(self.name, context.actor_id)
        return decision

    async def execute_interaction(self, interaction: Any) -> Decision:
        """Gate a slash command invocation and run the handler when allowed."""
        # Subcommand and group options carry no value
        args = [
            str(option["value"])
            for option in (interaction.data or {}).get("options", [])
            if option.get("value") is not None
        ]
        context = InvocationContext.from_interaction(interaction, args)
        decision = self.gate.evaluate(self.policy, context)

        if isinstance(decision, Reject):
            if decision.message:
                await interaction.response.send_message(decision.message, ephemeral=True)
            return decision

        await interaction.response.defer(ephemeral=self.policy.slash_command.ephemeral)
        try:
            await self.interaction_run(interaction)
        except Exception:
            # The deferred response stays pending until a followup is sent
            await DiscordUtils.safe_send(
                interaction.followup, "Something went wrong while running this command.", ephemeral=True
            )
            raise
        finally:
            self.gate.record_use(self.name, context.actor_id)
        return decision

    async def _present_rejection(self, message: Any, decision: Reject, prefix: str, invoke: str) -> None:
        if decision.reason is RejectReason.CANNOT_SEND:
            return
        if decision.reason is RejectReason.MISSING_ARGUMENTS:
            await self.send_usage(message.channel, prefix, invoke, "Missing arguments")
            return
        await DiscordUtils.safe_reply(message, decision.message)

    def get_usage_embed(self, prefix: str, invoke: Optional[str] = None, title: Optional[str] = "Command Usage") -> discord.Embed:
        """
        Build a usage embed for this command.

        Args:
            prefix: Command prefix
            invoke: Alias that was used to trigger this command
            title: Embed author line, omitted when empty
        """
        embed = discord.Embed(
            color=EMBED_COLORS["BOT_EMBED"],
            description=build_usage(self.policy, prefix, invoke or self.name),
        )
        if title:
            embed.set_author(name=title)
        return embed

    async def send_usage(self, channel: Any, prefix: str, invoke: Optional[str] = None, title: str = "Command Usage") -> None:
        await DiscordUtils.safe_send(channel, embed=self.get_usage_embed(prefix, invoke, title))
