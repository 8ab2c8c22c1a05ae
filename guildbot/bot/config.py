"""
Configuration management for guildbot.
Loads environment variables and provides configuration settings.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Tuple

from dotenv import load_dotenv

from guildbot.utils.validation import ValidationUtils

# Load environment variables from the .env file at the project root
env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

EMOJIS = {
    "ARROW": "❯",
    "TICK": "✓",
    "X_MARK": "✕",
}

EMBED_COLORS = {
    "BOT_EMBED": 0x068ADD,
    "SUCCESS": 0x00A56A,
    "ERROR": 0xD61A3C,
    "WARNING": 0xF7E919,
}


@dataclass(frozen=True)
class Config:
    """Bot configuration settings."""

    # Discord
    DISCORD_TOKEN: str

    # Commands
    PREFIX: str = "!"
    OWNER_IDS: FrozenSet[int] = field(default_factory=frozenset)
    # Modules exposing setup(client) that register commands
    COMMAND_MODULES: Tuple[str, ...] = ()

    # Web Server (keep-alive)
    PORT: int = 8080
    HOST: str = "0.0.0.0"

    # Debug
    DEBUG: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            DISCORD_TOKEN=os.getenv("DISCORD_TOKEN", ""),
            PREFIX=os.getenv("PREFIX", "!"),
            OWNER_IDS=ValidationUtils.parse_owner_ids(os.getenv("OWNER_IDS", "")),
            COMMAND_MODULES=tuple(m.strip() for m in os.getenv("COMMAND_MODULES", "").split(",") if m.strip()),
            PORT=int(os.getenv("PORT", "8080")),
            HOST=os.getenv("HOST", "0.0.0.0"),
            DEBUG=os.getenv("DEBUG", "false").lower() == "true",
        )

    def validate(self) -> None:
        """Validate required configuration."""
        if not self.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not self.PREFIX or any(ch.isspace() for ch in self.PREFIX):
            raise ValueError("PREFIX must be a non-empty string without whitespace")


# Global config instance
config = Config.from_env()
