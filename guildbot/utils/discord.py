"""
Discord Utilities
Helper functions for Discord interactions and the host capability adapter
"""

import math
from typing import Any, Iterable, List, Optional

import discord

# Display names for the permission flags a command may require.
# Keys are discord.py Permissions attribute names, upper-cased.
PERMISSION_NAMES = {
    "ADD_REACTIONS": "Add Reactions",
    "ADMINISTRATOR": "Administrator",
    "ATTACH_FILES": "Attach files",
    "BAN_MEMBERS": "Ban members",
    "CHANGE_NICKNAME": "Change nickname",
    "CONNECT": "Connect",
    "CREATE_INSTANT_INVITE": "Create instant invite",
    "CREATE_PRIVATE_THREADS": "Create private threads",
    "CREATE_PUBLIC_THREADS": "Create public threads",
    "DEAFEN_MEMBERS": "Deafen members",
    "EMBED_LINKS": "Embed links",
    "KICK_MEMBERS": "Kick members",
    "MANAGE_CHANNELS": "Manage channels",
    "MANAGE_EMOJIS_AND_STICKERS": "Manage emojis and stickers",
    "MANAGE_EVENTS": "Manage Events",
    "MANAGE_GUILD": "Manage server",
    "MANAGE_MESSAGES": "Manage messages",
    "MANAGE_NICKNAMES": "Manage nicknames",
    "MANAGE_ROLES": "Manage roles",
    "MANAGE_THREADS": "Manage Threads",
    "MANAGE_WEBHOOKS": "Manage webhooks",
    "MENTION_EVERYONE": "Mention everyone",
    "MODERATE_MEMBERS": "Moderate Members",
    "MOVE_MEMBERS": "Move members",
    "MUTE_MEMBERS": "Mute members",
    "PRIORITY_SPEAKER": "Priority speaker",
    "READ_MESSAGE_HISTORY": "Read message history",
    "REQUEST_TO_SPEAK": "Request to Speak",
    "SEND_MESSAGES": "Send messages",
    "SEND_MESSAGES_IN_THREADS": "Send Messages in Threads",
    "SEND_TTS_MESSAGES": "Send TTS messages",
    "SPEAK": "Speak",
    "STREAM": "Video",
    "USE_APPLICATION_COMMANDS": "Use Application Commands",
    "USE_EXTERNAL_EMOJIS": "Use External Emojis",
    "USE_EXTERNAL_STICKERS": "Use External Stickers",
    "USE_VOICE_ACTIVATION": "Use voice activity",
    "VIEW_AUDIT_LOG": "View audit log",
    "VIEW_CHANNEL": "View channel",
    "VIEW_GUILD_INSIGHTS": "View server insights",
}

_DURATION_UNITS = (
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


class DiscordUtils:
    """Utility class for Discord-related helper functions."""

    @staticmethod
    async def safe_send(channel: Any, content: Optional[str] = None, **kwargs: Any) -> Optional[Any]:
        """
        Safely send a message to a channel (suppress HTTP errors).

        Args:
            channel: Discord channel
            content: Message content
            **kwargs: Extra send() arguments such as embed

        Returns:
            Sent message or None if failed
        """
        if not channel or not hasattr(channel, "send"):
            return None
        try:
            return await channel.send(content, **kwargs)
        except discord.HTTPException:
            return None

    @staticmethod
    async def safe_reply(message: Any, content: str) -> Optional[Any]:
        """
        Safely reply to a message (suppress HTTP errors).

        Args:
            message: Discord message
            content: Reply content

        Returns:
            Sent message or None if failed
        """
        if not message or not hasattr(message, "reply"):
            return None
        try:
            return await message.reply(content)
        except discord.HTTPException:
            return None

    @staticmethod
    def format_duration(seconds: float) -> str:
        """
        Format duration in human readable format.

        Fractional seconds are rounded up, so 6.2 becomes "7 seconds".

        Args:
            seconds: Duration in seconds

        Returns:
            Formatted duration string, e.g. "1 hour, 2 minutes"
        """
        remaining = max(0, math.ceil(seconds))
        if remaining == 0:
            return "0 seconds"

        parts: List[str] = []
        for unit, size in _DURATION_UNITS:
            count, remaining = divmod(remaining, size)
            if count:
                parts.append(f"{count} {unit}{'s' if count != 1 else ''}")

        return ", ".join(parts)

    @staticmethod
    def permission_name(permission: str) -> str:
        """Display name for a permission flag."""
        return PERMISSION_NAMES.get(permission, permission)


class DiscordHost:
    """Capability queries answered from discord.py channel/guild objects."""

    @staticmethod
    def can_send(channel: Any) -> bool:
        guild = getattr(channel, "guild", None)
        if guild is None:
            # DMs have no permission overwrites
            return True
        return channel.permissions_for(guild.me).send_messages

    @staticmethod
    def has_permissions(member: Any, channel: Any, permissions: Iterable[str]) -> bool:
        if getattr(channel, "guild", None) is None:
            return True
        resolved = channel.permissions_for(member)
        return all(getattr(resolved, name.lower(), False) for name in permissions)

    @staticmethod
    def is_restricted_channel(channel: Any) -> bool:
        is_nsfw = getattr(channel, "is_nsfw", None)
        return bool(is_nsfw()) if callable(is_nsfw) else False

    @staticmethod
    def is_guild_owner(member: Any, guild: Any) -> bool:
        return guild is not None and guild.owner_id == member.id

    @staticmethod
    def bot_member(channel: Any) -> Any:
        """The bot's own member object in the channel's guild, if any."""
        guild = getattr(channel, "guild", None)
        return guild.me if guild is not None else None
