# tests/conftest.py
"""Shared pytest fixtures and fakes for the command tests.

The fakes stand in for discord.py members, channels, guilds and messages so
the gate and command layers can be exercised without a gateway connection.
"""

from types import SimpleNamespace
from typing import Iterable, Set
from unittest.mock import AsyncMock

import pytest

from guildbot.commands.gate import CommandGate
from guildbot.commands.policy import CommandPolicy
from guildbot.repositories.cooldown_repository import CooldownRepository

OWNER_ID = 111111111111111111
GUILD_OWNER_ID = 222222222222222222
MEMBER_ID = 333333333333333333
BOT_ID = 999999999999999999


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeHost:
    """Capability answers configured per test."""

    def __init__(self):
        self.sendable = True
        self.nsfw = False
        self.granted: dict = {}
        self.bot = SimpleNamespace(id=BOT_ID, bot=True)

    def grant(self, member_id: int, *permissions: str) -> None:
        self.granted.setdefault(member_id, set()).update(permissions)

    def can_send(self, channel) -> bool:
        return self.sendable

    def has_permissions(self, member, channel, permissions: Iterable[str]) -> bool:
        held: Set[str] = self.granted.get(member.id, set())
        return all(p in held for p in permissions)

    def is_restricted_channel(self, channel) -> bool:
        return self.nsfw

    def is_guild_owner(self, member, guild) -> bool:
        return guild is not None and guild.owner_id == member.id

    def bot_member(self, channel):
        return self.bot


def make_member(member_id: int = MEMBER_ID, bot: bool = False) -> SimpleNamespace:
    return SimpleNamespace(id=member_id, bot=bot)


def make_message(content: str = "", author=None, guild=None) -> SimpleNamespace:
    channel = SimpleNamespace(send=AsyncMock(), guild=guild)
    return SimpleNamespace(
        content=content,
        author=author or make_member(),
        channel=channel,
        guild=guild,
        reply=AsyncMock(),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cooldowns(clock) -> CooldownRepository:
    return CooldownRepository(clock=clock)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def guild() -> SimpleNamespace:
    return SimpleNamespace(id=444444444444444444, owner_id=GUILD_OWNER_ID)


@pytest.fixture
def gate(cooldowns, host) -> CommandGate:
    return CommandGate(cooldowns, host, owner_ids={OWNER_ID})


@pytest.fixture
def client(gate) -> SimpleNamespace:
    """Minimal stand-in for BotClient: commands only need .gate."""
    return SimpleNamespace(gate=gate)


@pytest.fixture
def policy_factory():
    def factory(**overrides) -> CommandPolicy:
        fields = {"name": "list", "description": "", "enabled": True}
        fields.update(overrides)
        return CommandPolicy(**fields)

    return factory
