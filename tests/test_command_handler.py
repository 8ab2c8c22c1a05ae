"""Tests for message and interaction routing."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import MEMBER_ID, make_member, make_message
from guildbot.commands.command import Command
from guildbot.commands.command_handler import CommandHandler
from guildbot.commands.command_registry import CommandRegistry
from guildbot.commands.gate import Proceed, RejectReason
from guildbot.commands.policy import CommandPolicy, InteractionPolicy
from guildbot.utils.error_handler import ErrorHandler


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def monitoring() -> MagicMock:
    return MagicMock()


@pytest.fixture
def error_handler() -> ErrorHandler:
    return ErrorHandler(max_errors_per_minute=2)


@pytest.fixture
def handler(registry, monitoring, error_handler) -> CommandHandler:
    return CommandHandler(registry, "!", monitoring, error_handler)


class TestParseCommand:
    """Prefix and argument splitting."""

    def test_splits_invoke_and_args(self, handler):
        assert handler.parse_command("!List  add   milk") == ("list", ["add", "milk"])

    def test_requires_prefix(self, handler):
        assert handler.parse_command("list add") is None

    def test_prefix_only(self, handler):
        assert handler.parse_command("!   ") is None

    def test_strips_invisible_characters(self, handler):
        assert handler.parse_command("\u200b!ping") == ("ping", [])


class TestHandle:
    """Message dispatch."""

    @pytest.mark.asyncio
    async def test_dispatches_by_alias(self, handler, registry, client, monitoring):
        run = AsyncMock()
        registry.register(Command(client, CommandPolicy(name="list", aliases=("ls",), enabled=True), message_handler=run))
        message = make_message("!ls milk")

        decision = await handler.handle(message)

        assert isinstance(decision, Proceed)
        run.assert_awaited_once()
        assert run.await_args.args[2:] == (["milk"], "ls", "!")
        monitoring.record_command.assert_called_once()

    @pytest.mark.asyncio
    async def test_ignores_bots(self, handler, registry, client):
        run = AsyncMock()
        registry.register(Command(client, CommandPolicy(name="ping", enabled=True), message_handler=run))

        assert await handler.handle(make_message("!ping", author=make_member(bot=True))) is None
        run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ignores_unknown_and_disabled(self, handler, registry, client):
        run = AsyncMock()
        registry.register(Command(client, CommandPolicy(name="ping"), message_handler=run))

        assert await handler.handle(make_message("!ping")) is None
        assert await handler.handle(make_message("!pong")) is None
        run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_records_rejections(self, handler, registry, client, monitoring):
        registry.register(Command(client, CommandPolicy(name="ping", enabled=True, bot_owner_only=True), message_handler=AsyncMock()))

        decision = await handler.handle(make_message("!ping"))

        assert decision.reason is RejectReason.NOT_BOT_OWNER
        monitoring.record_rejection.assert_called_once_with("NOT_BOT_OWNER")

    @pytest.mark.asyncio
    async def test_not_implemented_is_reported(self, handler, registry, client, monitoring, error_handler):
        registry.register(Command(client, CommandPolicy(name="ping", enabled=True)))

        assert await handler.handle(make_message("!ping")) is None

        monitoring.record_error.assert_called_once()
        assert error_handler.error_counts == {"command:ping:CommandNotImplementedError": 1}

    @pytest.mark.asyncio
    async def test_circuit_breaker_skips_command(self, handler, registry, client, error_handler):
        run = AsyncMock(side_effect=RuntimeError("boom"))
        registry.register(Command(client, CommandPolicy(name="ping", enabled=True), message_handler=run))

        await handler.handle(make_message("!ping"))
        await handler.handle(make_message("!ping"))
        assert error_handler.is_circuit_broken("command:ping")

        await handler.handle(make_message("!ping"))
        assert run.await_count == 2


class TestHandleInteraction:
    """Slash command dispatch."""

    @staticmethod
    def make_interaction(name, kind=discord.InteractionType.application_command):
        return SimpleNamespace(
            type=kind,
            user=SimpleNamespace(id=MEMBER_ID, bot=False),
            channel=object(),
            guild=None,
            command=None,
            data={"name": name, "options": []},
            response=SimpleNamespace(send_message=AsyncMock(), defer=AsyncMock()),
        )

    @pytest.mark.asyncio
    async def test_dispatches_slash_enabled_command(self, handler, registry, client):
        run = AsyncMock()
        policy = CommandPolicy(name="ping", slash_command=InteractionPolicy(enabled=True))
        registry.register(Command(client, policy, interaction_handler=run))

        decision = await handler.handle_interaction(self.make_interaction("ping"))

        assert isinstance(decision, Proceed)
        run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ignores_slash_disabled_and_components(self, handler, registry, client):
        run = AsyncMock()
        registry.register(Command(client, CommandPolicy(name="ping", enabled=True), interaction_handler=run))

        assert await handler.handle_interaction(self.make_interaction("ping")) is None
        assert await handler.handle_interaction(
            self.make_interaction("ping", kind=discord.InteractionType.component)
        ) is None
        run.assert_not_awaited()
