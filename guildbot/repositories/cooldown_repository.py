"""
Cooldown Repository
Handles command cooldown tracking
"""

import time
from typing import Callable, Dict, Optional, Union

from guildbot.utils.logger import get_logger

UserId = Union[int, str]


class CooldownRepository:
    """
    In-memory store of the last use of a command by a user.

    One instance is created by the bot client and shared by every command.
    Entries are evicted lazily when read after their cooldown has elapsed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Create CooldownRepository instance.

        Args:
            clock: Returns monotonic time in seconds
        """
        self.logger = get_logger("Cooldowns")
        self._clock = clock
        self._last_use: Dict[str, float] = {}

    @staticmethod
    def make_key(command: str, user_id: UserId) -> str:
        return f"{command}|{user_id}"

    def get_last_use(self, command: str, user_id: UserId) -> Optional[float]:
        """Timestamp of the last recorded use, or None."""
        return self._last_use.get(self.make_key(command, user_id))

    def set_cooldown(self, command: str, user_id: UserId) -> None:
        """
        Record a use of command by user at the current time.

        Args:
            command: Command name
            user_id: User ID
        """
        self._last_use[self.make_key(command, user_id)] = self._clock()

    def get_remaining_time(self, command: str, user_id: UserId, duration: float) -> float:
        """
        Get remaining cooldown time in seconds.

        Args:
            command: Command name
            user_id: User ID
            duration: Cooldown of the command in seconds

        Returns:
            Remaining seconds, between 0 and duration
        """
        key = self.make_key(command, user_id)
        last_use = self._last_use.get(key)
        if last_use is None:
            return 0.0

        # A timestamp ahead of the clock counts as used just now
        elapsed = max(0.0, self._clock() - last_use)
        if elapsed >= duration:
            del self._last_use[key]
            return 0.0

        return duration - elapsed

    def is_on_cooldown(self, command: str, user_id: UserId, duration: float) -> bool:
        return self.get_remaining_time(command, user_id, duration) > 0

    def clear_cooldown(self, command: str, user_id: UserId) -> bool:
        """
        Clear cooldown for user and command.

        Returns:
            True if an entry was removed
        """
        return self._last_use.pop(self.make_key(command, user_id), None) is not None

    def clear_user_cooldowns(self, user_id: UserId) -> int:
        """
        Clear all cooldowns for a user.

        Returns:
            Number of cleared cooldowns
        """
        suffix = f"|{user_id}"
        keys = [key for key in self._last_use if key.endswith(suffix)]
        for key in keys:
            del self._last_use[key]
        if keys:
            self.logger.debug(f"Cleared {len(keys)} cooldowns for {user_id}")
        return len(keys)

    def clear(self) -> None:
        self._last_use.clear()

    def __len__(self) -> int:
        return len(self._last_use)

    def __contains__(self, key: str) -> bool:
        return key in self._last_use
