"""
Command Gate
Ordered precondition checks run before a command's handler
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from guildbot.commands.policy import CommandPolicy
from guildbot.commands.usage import build_usage, parse_permissions
from guildbot.repositories.cooldown_repository import CooldownRepository, UserId
from guildbot.utils.discord import DiscordUtils


class RejectReason(str, Enum):
    ON_COOLDOWN = "ON_COOLDOWN"
    # Never shown to the user
    CANNOT_SEND = "CANNOT_SEND"
    MISSING_ARGUMENTS = "MISSING_ARGUMENTS"
    NOT_GUILD_OWNER = "NOT_GUILD_OWNER"
    NOT_BOT_OWNER = "NOT_BOT_OWNER"
    CHANNEL_RESTRICTED = "CHANNEL_RESTRICTED"
    MISSING_USER_PERMISSIONS = "MISSING_USER_PERMISSIONS"
    MISSING_BOT_PERMISSIONS = "MISSING_BOT_PERMISSIONS"


@dataclass(frozen=True)
class Proceed:
    allowed = True


@dataclass(frozen=True)
class Reject:
    reason: RejectReason
    message: Optional[str] = None

    allowed = False


Decision = Union[Proceed, Reject]


class HostCapabilities(Protocol):
    """What the gate needs to know from the chat platform."""

    def can_send(self, channel: Any) -> bool: ...

    def has_permissions(self, member: Any, channel: Any, permissions: Iterable[str]) -> bool: ...

    def is_restricted_channel(self, channel: Any) -> bool: ...

    def is_guild_owner(self, member: Any, guild: Any) -> bool: ...

    def bot_member(self, channel: Any) -> Any: ...


@dataclass(frozen=True)
class InvocationContext:
    """Who invoked a command, where, and with what."""

    actor: Any
    channel: Any
    guild: Any
    args: Tuple[str, ...] = ()
    invoke: str = ""
    prefix: str = ""

    @property
    def actor_id(self) -> UserId:
        return self.actor.id

    @classmethod
    def from_message(cls, message: Any, args: Sequence[str], invoke: str, prefix: str) -> "InvocationContext":
        return cls(
            actor=message.author,
            channel=message.channel,
            guild=message.guild,
            args=tuple(args),
            invoke=invoke,
            prefix=prefix,
        )

    @classmethod
    def from_interaction(cls, interaction: Any, args: Sequence[str], prefix: str = "/") -> "InvocationContext":
        return cls(
            actor=interaction.user,
            channel=interaction.channel,
            guild=interaction.guild,
            args=tuple(args),
            invoke=interaction.command.name if interaction.command else "",
            prefix=prefix,
        )


class CommandGate:
    """
    Authorizes or rejects a single invocation.

    Checks run in a fixed order and the first failure wins. evaluate() never
    records a use; callers call record_use() after running the command.
    """

    def __init__(self, cooldowns: CooldownRepository, host: HostCapabilities, owner_ids: Iterable[int] = ()):
        self.cooldowns = cooldowns
        self.host = host
        self.owner_ids = frozenset(owner_ids)

    def evaluate(self, policy: CommandPolicy, context: InvocationContext) -> Decision:
        if policy.cooldown > 0:
            remaining = self.remaining(policy, context.actor_id)
            if remaining > 0:
                return Reject(
                    RejectReason.ON_COOLDOWN,
                    f"You are on cooldown. You can use the command after {DiscordUtils.format_duration(remaining)}",
                )

        # No reply here, replying would fail for the same reason
        if not self.host.can_send(context.channel):
            return Reject(RejectReason.CANNOT_SEND)

        if policy.min_args_count > 0 and len(context.args) < policy.min_args_count:
            return Reject(
                RejectReason.MISSING_ARGUMENTS,
                build_usage(policy, context.prefix, context.invoke or policy.name),
            )

        if policy.guild_owner_only and not self.host.is_guild_owner(context.actor, context.guild):
            return Reject(
                RejectReason.NOT_GUILD_OWNER,
                f"The `{policy.name}` command can only be used by the guild owner.",
            )

        if policy.bot_owner_only and context.actor_id not in self.owner_ids:
            return Reject(
                RejectReason.NOT_BOT_OWNER,
                f"The `{policy.name}` command can only be used by the bot owner.",
            )

        if policy.nsfw and not self.host.is_restricted_channel(context.channel):
            return Reject(
                RejectReason.CHANNEL_RESTRICTED,
                f"The `{policy.name}` command can only be used in NSFW Channel.",
            )

        if policy.user_permissions:
            missing = self.missing_permissions(context.actor, context.channel, policy.user_permissions)
            if missing:
                return Reject(
                    RejectReason.MISSING_USER_PERMISSIONS,
                    f"You need {parse_permissions(missing)} for this command",
                )

        if policy.bot_permissions:
            me = self.host.bot_member(context.channel)
            missing = self.missing_permissions(me, context.channel, policy.bot_permissions)
            if missing:
                return Reject(
                    RejectReason.MISSING_BOT_PERMISSIONS,
                    f"I need {parse_permissions(missing)} for this command",
                )

        return Proceed()

    def missing_permissions(self, member: Any, channel: Any, permissions: Sequence[str]) -> List[str]:
        if self.host.has_permissions(member, channel, permissions):
            return []
        missing = [p for p in permissions if not self.host.has_permissions(member, channel, (p,))]
        return missing or list(permissions)

    def remaining(self, policy: CommandPolicy, actor_id: UserId) -> float:
        """Seconds until actor may use the command again."""
        if policy.cooldown <= 0:
            return 0.0
        return self.cooldowns.get_remaining_time(policy.name, actor_id, policy.cooldown)

    def record_use(self, command_name: str, actor_id: UserId) -> None:
        self.cooldowns.set_cooldown(command_name, actor_id)
