"""
Command Policy
Static, validated configuration of a command
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from guildbot.utils.discord import PERMISSION_NAMES

CATEGORIES = (
    "ADMIN",
    "AUTOMOD",
    "ECONOMY",
    "FUN",
    "IMAGE",
    "INFORMATION",
    "INVITE",
    "MODERATION",
    "NONE",
    "OWNER",
    "SOCIAL",
    "TICKET",
    "UTILITY",
)


class PolicyError(Exception):
    """A command definition is malformed and cannot be registered."""


@dataclass(frozen=True)
class SubCommand:
    trigger: str
    description: str = ""


@dataclass(frozen=True)
class InteractionPolicy:
    """How the command behaves as a slash command."""

    enabled: bool = False
    ephemeral: bool = False
    options: Tuple[Dict[str, Any], ...] = ()


def _string_list(section: Mapping, key: str) -> Tuple[str, ...]:
    value = section.get(key, ())
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise PolicyError(f"{key} must be a list of strings, got {type(value).__name__}.")
    return tuple(value)


@dataclass(frozen=True)
class CommandPolicy:
    """
    Everything the gate needs to know about a command.

    Every field except name has a default. Validation runs on construction,
    so a policy that exists is always well formed.
    """

    name: str
    description: str = ""
    cooldown: float = 0
    enabled: bool = False
    aliases: Tuple[str, ...] = ()
    usage: str = ""
    min_args_count: int = 0
    category: str = "NONE"
    subcommands: Tuple[SubCommand, ...] = ()
    user_permissions: Tuple[str, ...] = ()
    bot_permissions: Tuple[str, ...] = ()
    guild_owner_only: bool = False
    bot_owner_only: bool = False
    nsfw: bool = False
    hidden: bool = False
    slash_command: InteractionPolicy = field(default_factory=InteractionPolicy)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name or self.name != self.name.lower():
            raise PolicyError("Command name must be a lowercase string.")
        if not isinstance(self.description, str):
            raise PolicyError("Command description must be a string.")
        if isinstance(self.cooldown, bool) or not isinstance(self.cooldown, (int, float)) or self.cooldown < 0:
            raise PolicyError(f"{self.name}: cooldown must be a non-negative number of seconds.")
        if isinstance(self.min_args_count, bool) or not isinstance(self.min_args_count, int) or self.min_args_count < 0:
            raise PolicyError(f"{self.name}: min_args_count must be a non-negative integer.")
        if self.category not in CATEGORIES:
            raise PolicyError(f"{self.name}: unknown category {self.category!r}.")
        for field_name in ("aliases", "user_permissions", "bot_permissions"):
            if not isinstance(getattr(self, field_name), tuple):
                raise PolicyError(f"{self.name}: {field_name} must be a tuple of strings.")
        for alias in self.aliases:
            if not isinstance(alias, str) or not alias or alias != alias.lower():
                raise PolicyError(f"{self.name}: aliases must be lowercase strings.")
        for permission in self.user_permissions + self.bot_permissions:
            if permission not in PERMISSION_NAMES:
                raise PolicyError(f"{self.name}: unknown permission {permission!r}.")

    @property
    def names(self) -> Tuple[str, ...]:
        """Name followed by aliases."""
        return (self.name,) + self.aliases

    @classmethod
    def from_data(cls, data: Any) -> "CommandPolicy":
        """
        Build a policy from a command data mapping.

        Args:
            data: Mapping with keys name, description, cooldown and the
                optional sub-mappings command and slash_command

        Returns:
            Validated policy

        Raises:
            PolicyError: If data is not a mapping or any field is invalid
        """
        if not isinstance(data, Mapping):
            raise PolicyError("Command info must be a mapping.")

        command = data.get("command") or {}
        slash = data.get("slash_command") or {}
        if not isinstance(command, Mapping) or not isinstance(slash, Mapping):
            raise PolicyError("command and slash_command must be mappings.")

        try:
            subcommands = tuple(
                SubCommand(trigger=sub["trigger"], description=sub.get("description", ""))
                for sub in command.get("subcommands", ())
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise PolicyError(f"Invalid subcommand definition: {e}") from e

        return cls(
            name=data.get("name"),
            description=data.get("description"),
            cooldown=data.get("cooldown") or 0,
            enabled=bool(command.get("enabled", False)),
            aliases=_string_list(command, "aliases"),
            usage=command.get("usage", ""),
            min_args_count=command.get("min_args_count", 0),
            category=command.get("category", "NONE"),
            subcommands=subcommands,
            user_permissions=_string_list(command, "user_permissions"),
            bot_permissions=_string_list(command, "bot_permissions"),
            guild_owner_only=bool(command.get("guild_owner_only", False)),
            bot_owner_only=bool(command.get("bot_owner_only", False)),
            nsfw=bool(command.get("nsfw", False)),
            hidden=bool(command.get("hidden", False)),
            slash_command=InteractionPolicy(
                enabled=bool(slash.get("enabled", False)),
                ephemeral=bool(slash.get("ephemeral", False)),
                options=tuple(slash.get("options", ())),
            ),
        )
