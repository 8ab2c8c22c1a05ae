"""Tests for Command execution around the gate."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import MEMBER_ID, make_message
from guildbot.commands.command import Command, CommandNotImplementedError
from guildbot.commands.gate import Proceed, Reject, RejectReason
from guildbot.commands.policy import CommandPolicy, InteractionPolicy, PolicyError


class TestConstruction:
    """Validation at construction time."""

    def test_client_required(self):
        with pytest.raises(PolicyError, match="client"):
            Command(None, CommandPolicy(name="ping"))

    def test_builds_policy_from_mapping(self, client):
        command = Command(client, {"name": "ping", "description": "Pong", "command": {"enabled": True}})

        assert command.name == "ping"
        assert command.description == "Pong"
        assert command.policy.enabled is True

    def test_invalid_mapping_rejected(self, client):
        with pytest.raises(PolicyError):
            Command(client, {"name": "Ping", "description": ""})

    def test_implementation_detection(self, client):
        class Ping(Command):
            async def message_run(self, message, args, invoke, prefix):
                pass

        assert Ping(client, CommandPolicy(name="ping")).implements_messages()
        assert not Ping(client, CommandPolicy(name="ping")).implements_interactions()
        assert not Command(client, CommandPolicy(name="ping")).implements_messages()


class TestExecute:
    """Message invocation flow."""

    @pytest.mark.asyncio
    async def test_runs_handler_and_records_cooldown(self, client, cooldowns, policy_factory):
        handler = AsyncMock()
        command = Command(client, policy_factory(cooldown=10), message_handler=handler)
        message = make_message("!list a")

        decision = await command.execute(message, ["a"], "list", "!")

        assert isinstance(decision, Proceed)
        handler.assert_awaited_once_with(command, message, ["a"], "list", "!")
        assert cooldowns.get_last_use("list", MEMBER_ID) is not None

    @pytest.mark.asyncio
    async def test_second_call_on_cooldown_replies(self, client, clock, policy_factory):
        handler = AsyncMock()
        command = Command(client, policy_factory(cooldown=10), message_handler=handler)

        await command.execute(make_message(), [], "list", "!")
        clock.advance(3)
        message = make_message()
        decision = await command.execute(message, [], "list", "!")

        assert decision.reason is RejectReason.ON_COOLDOWN
        assert handler.await_count == 1
        message.reply.assert_awaited_once_with(
            "You are on cooldown. You can use the command after 7 seconds"
        )

    @pytest.mark.asyncio
    async def test_rejected_call_does_not_consume_cooldown(self, client, cooldowns, policy_factory):
        command = Command(client, policy_factory(cooldown=10, bot_owner_only=True), message_handler=AsyncMock())

        decision = await command.execute(make_message(), [], "list", "!")

        assert isinstance(decision, Reject)
        assert len(cooldowns) == 0

    @pytest.mark.asyncio
    async def test_failing_handler_still_records_and_propagates(self, client, cooldowns, policy_factory):
        handler = AsyncMock(side_effect=RuntimeError("boom"))
        command = Command(client, policy_factory(cooldown=10), message_handler=handler)

        with pytest.raises(RuntimeError, match="boom"):
            await command.execute(make_message(), [], "list", "!")

        assert cooldowns.get_last_use("list", MEMBER_ID) is not None

    @pytest.mark.asyncio
    async def test_missing_arguments_sends_usage_embed(self, client, policy_factory):
        command = Command(client, policy_factory(min_args_count=1, usage="<user>"), message_handler=AsyncMock())
        message = make_message()

        await command.execute(message, [], "ls", "!")

        message.reply.assert_not_awaited()
        embed = message.channel.send.await_args.kwargs["embed"]
        assert isinstance(embed, discord.Embed)
        assert embed.author.name == "Missing arguments"
        assert "!ls <user>" in embed.description

    @pytest.mark.asyncio
    async def test_cannot_send_is_silent(self, client, host, policy_factory):
        host.sendable = False
        handler = AsyncMock()
        command = Command(client, policy_factory(), message_handler=handler)
        message = make_message()

        decision = await command.execute(message, [], "list", "!")

        assert decision.reason is RejectReason.CANNOT_SEND
        message.reply.assert_not_awaited()
        message.channel.send.assert_not_awaited()
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enabled_without_handler_raises(self, client, policy_factory):
        command = Command(client, policy_factory(enabled=True))

        with pytest.raises(CommandNotImplementedError, match="list"):
            await command.execute(make_message(), [], "list", "!")

    @pytest.mark.asyncio
    async def test_disabled_without_handler_is_noop(self, client, policy_factory):
        command = Command(client, policy_factory(enabled=False))

        assert isinstance(await command.execute(make_message(), [], "list", "!"), Proceed)

    @pytest.mark.asyncio
    async def test_subclass_override(self, client, policy_factory):
        calls = []

        class Echo(Command):
            async def message_run(self, message, args, invoke, prefix):
                calls.append(args)

        await Echo(client, policy_factory()).execute(make_message(), ["hi"], "list", "!")

        assert calls == [["hi"]]


class TestExecuteInteraction:
    """Slash command invocation flow."""

    @staticmethod
    def make_interaction(options=(), raw_options=None):
        if raw_options is None:
            raw_options = [{"name": "item", "value": v} for v in options]
        return SimpleNamespace(
            user=SimpleNamespace(id=MEMBER_ID, bot=False),
            channel=object(),
            guild=None,
            command=SimpleNamespace(name="list"),
            data={"name": "list", "options": raw_options},
            response=SimpleNamespace(send_message=AsyncMock(), defer=AsyncMock()),
            followup=SimpleNamespace(send=AsyncMock()),
        )

    @pytest.mark.asyncio
    async def test_runs_interaction_handler(self, client, cooldowns):
        handler = AsyncMock()
        policy = CommandPolicy(name="list", cooldown=5, slash_command=InteractionPolicy(enabled=True, ephemeral=True))
        command = Command(client, policy, interaction_handler=handler)
        interaction = self.make_interaction(["milk"])

        decision = await command.execute_interaction(interaction)

        assert isinstance(decision, Proceed)
        interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        handler.assert_awaited_once_with(command, interaction)
        assert cooldowns.get_last_use("list", MEMBER_ID) is not None

    @pytest.mark.asyncio
    async def test_rejection_is_ephemeral(self, client, policy_factory):
        command = Command(client, policy_factory(bot_owner_only=True), interaction_handler=AsyncMock())
        interaction = self.make_interaction()

        decision = await command.execute_interaction(interaction)

        assert decision.reason is RejectReason.NOT_BOT_OWNER
        interaction.response.send_message.assert_awaited_once()
        assert interaction.response.send_message.await_args.kwargs == {"ephemeral": True}
        interaction.response.defer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_min_args_counts_options(self, client, policy_factory):
        command = Command(client, policy_factory(min_args_count=1), interaction_handler=AsyncMock())

        decision = await command.execute_interaction(self.make_interaction(["milk"]))

        assert isinstance(decision, Proceed)

    @pytest.mark.asyncio
    async def test_failing_handler_sends_followup(self, client, cooldowns):
        handler = AsyncMock(side_effect=RuntimeError("boom"))
        policy = CommandPolicy(name="list", slash_command=InteractionPolicy(enabled=True))
        command = Command(client, policy, interaction_handler=handler)
        interaction = self.make_interaction()

        with pytest.raises(RuntimeError, match="boom"):
            await command.execute_interaction(interaction)

        interaction.response.defer.assert_awaited_once()
        interaction.followup.send.assert_awaited_once()
        assert interaction.followup.send.await_args.kwargs == {"ephemeral": True}
        assert cooldowns.get_last_use("list", MEMBER_ID) is not None

    @pytest.mark.asyncio
    async def test_missing_handler_sends_followup(self, client):
        command = Command(client, CommandPolicy(name="list", slash_command=InteractionPolicy(enabled=True)))
        interaction = self.make_interaction()

        with pytest.raises(CommandNotImplementedError):
            await command.execute_interaction(interaction)

        interaction.followup.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_followup_http_error_keeps_original_error(self, client):
        error = discord.HTTPException(MagicMock(status=404, reason="Not Found"), "Unknown Webhook")
        command = Command(
            client,
            CommandPolicy(name="list", slash_command=InteractionPolicy(enabled=True)),
            interaction_handler=AsyncMock(side_effect=RuntimeError("boom")),
        )
        interaction = self.make_interaction()
        interaction.followup.send.side_effect = error

        with pytest.raises(RuntimeError, match="boom"):
            await command.execute_interaction(interaction)

    @pytest.mark.asyncio
    async def test_options_without_value_are_not_args(self, client, policy_factory):
        command = Command(client, policy_factory(min_args_count=1), interaction_handler=AsyncMock())
        interaction = self.make_interaction(raw_options=[{"name": "add", "type": 1, "options": []}])

        decision = await command.execute_interaction(interaction)

        assert decision.reason is RejectReason.MISSING_ARGUMENTS
