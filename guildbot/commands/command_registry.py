"""
Command Registry
Centralized command registration and lookup
"""

from typing import Dict, List, Optional

from guildbot.commands.command import Command
from guildbot.commands.policy import PolicyError
from guildbot.commands.usage import build_usage
from guildbot.utils.logger import get_logger

CATEGORY_ICONS = {
    "ADMIN": "⚙️",
    "AUTOMOD": "🤖",
    "ECONOMY": "🪙",
    "FUN": "😂",
    "IMAGE": "🖼️",
    "INFORMATION": "🪧",
    "INVITE": "📨",
    "MODERATION": "🔨",
    "OWNER": "🤴",
    "SOCIAL": "🫂",
    "TICKET": "🎫",
    "UTILITY": "🛠",
}


class CommandRegistry:
    """Maps command names and aliases to commands."""

    def __init__(self):
        self.logger = get_logger("CommandRegistry")
        self.commands: Dict[str, Command] = {}
        self.aliases: Dict[str, str] = {}
        self.categories: Dict[str, List[Command]] = {}

    def register(self, command: Command) -> "CommandRegistry":
        """
        Register a command under its name and aliases.

        Args:
            command: Constructed (and therefore validated) command

        Returns:
            Self for chaining

        Raises:
            PolicyError: If the name or an alias is already taken
        """
        policy = command.policy
        for name in policy.names:
            if self.has(name):
                raise PolicyError(f"Command name or alias already registered: {name}")

        if policy.enabled and not command.implements_messages():
            self.logger.warning(f"{policy.name} is enabled but has no message handler")
        if policy.slash_command.enabled and not command.implements_interactions():
            self.logger.warning(f"{policy.name} has slash commands enabled but no interaction handler")

        self.commands[policy.name] = command
        for alias in policy.aliases:
            self.aliases[alias] = policy.name

        self.categories.setdefault(policy.category, []).append(command)

        self.logger.debug(f"Registered command: {policy.name}")
        return self

    def get(self, name: str) -> Optional[Command]:
        """
        Get a command by name or alias.

        Args:
            name: Command name or alias

        Returns:
            Command or None if not found
        """
        normalized = name.lower()

        if normalized in self.commands:
            return self.commands[normalized]

        alias_target = self.aliases.get(normalized)
        if alias_target:
            return self.commands.get(alias_target)

        return None

    def has(self, name: str) -> bool:
        normalized = name.lower()
        return normalized in self.commands or normalized in self.aliases

    def get_by_category(self, category: str) -> List[Command]:
        return self.categories.get(category, [])

    def get_categories(self) -> List[str]:
        return list(self.categories.keys())

    def get_all(self) -> List[Command]:
        return list(self.commands.values())

    def get_slash_commands(self) -> List[Command]:
        """Commands usable as slash commands."""
        return [cmd for cmd in self.commands.values() if cmd.policy.slash_command.enabled]

    def generate_help(self, prefix: str) -> str:
        """
        Generate help text for all visible commands.

        Args:
            prefix: Command prefix shown before each name

        Returns:
            Formatted help string
        """
        lines = ["📖 **Commands**", ""]

        for category, commands in self.categories.items():
            visible = [cmd for cmd in commands if cmd.policy.enabled and not cmd.policy.hidden]
            if not visible:
                continue

            lines.append(f"**{CATEGORY_ICONS.get(category, '•')} {category.title()}:**")
            for cmd in visible:
                aliases_str = f" ({', '.join(cmd.policy.aliases)})" if cmd.policy.aliases else ""
                lines.append(f"• `{prefix}{cmd.name}`{aliases_str} - {cmd.description}")
            lines.append("")

        return "\n".join(lines).rstrip()

    def generate_command_help(self, name: str, prefix: str) -> Optional[str]:
        """
        Generate detailed help for a specific command.

        Returns:
            Formatted help string or None if command not found or hidden
        """
        cmd = self.get(name)
        if not cmd or cmd.policy.hidden:
            return None

        lines = [f"📖 **Command:** `{cmd.name}`", ""]

        if cmd.policy.aliases:
            lines.append(f"**Aliases:** {', '.join(f'`{a}`' for a in cmd.policy.aliases)}")

        lines.append(build_usage(cmd.policy, prefix, cmd.name))
        return "\n".join(lines)
