"""
Usage and permission text for commands.
"""

from typing import Iterable, List

from guildbot.bot.config import EMOJIS
from guildbot.commands.policy import CommandPolicy
from guildbot.utils.discord import DiscordUtils


def parse_permissions(permissions: Iterable[str]) -> str:
    """
    Render permission flags for a rejection message.

    ["BAN_MEMBERS"] -> "`Ban members` permission"
    """
    names = [f"`{DiscordUtils.permission_name(p)}`" for p in permissions]
    word = "permissions" if len(names) > 1 else "permission"
    return f"{', '.join(names)} {word}"


def build_usage(policy: CommandPolicy, prefix: str, invoke: str) -> str:
    """
    Usage text for a command.

    Args:
        policy: Command policy
        prefix: Prefix the command was called with
        invoke: Name or alias the command was called with

    Returns:
        One line per subcommand, or a fenced usage block, followed by the
        description and cooldown when set
    """
    lines: List[str] = []
    if policy.subcommands:
        for sub in policy.subcommands:
            lines.append(f"{EMOJIS['ARROW']} {prefix}{invoke} {sub.trigger}: {sub.description}")
        desc = "\n".join(lines)
    else:
        line = f"{prefix}{invoke} {policy.usage}".rstrip()
        desc = f"**Usage:**\n```css\n{line}\n```"

    if policy.description:
        desc += f"\n**Help:** {policy.description}"

    if policy.cooldown:
        desc += f"\n**Cooldown:** {DiscordUtils.format_duration(policy.cooldown)}"

    return desc
