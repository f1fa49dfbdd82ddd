"""
Centralized configuration for the card game server.

Configuration is loaded from (in order of precedence):
1. Environment variables
2. .env file (if exists)
3. Default values

Usage:
    from config import config
    print(config.PORT)
    print(config.CARDS_FILE)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

DEFAULT_CARDS_FILE = str(Path(__file__).parent / "data" / "cards.json")


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off"):
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_optional_int(key: str) -> Optional[int]:
    """Get integer environment variable, or None if unset or malformed."""
    val = os.environ.get(key, "").strip()
    if not val:
        return None
    try:
        return int(val)
    except ValueError:
        return None


@dataclass
class ServerConfig:
    """Server configuration."""
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Card catalog
    CARDS_FILE: str = DEFAULT_CARDS_FILE

    # Game defaults
    DEFAULT_GOAL: int = 10

    # Seed for draw pile and czar order shuffles (None = system randomness)
    SHUFFLE_SEED: Optional[int] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            HOST=get_env("HOST", "0.0.0.0"),
            PORT=get_env_int("PORT", 8000),
            DEBUG=get_env_bool("DEBUG", False),
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            CARDS_FILE=get_env("CARDS_FILE", DEFAULT_CARDS_FILE),
            DEFAULT_GOAL=max(1, get_env_int("DEFAULT_GOAL", 10)),
            SHUFFLE_SEED=get_env_optional_int("SHUFFLE_SEED"),
        )


# Global config instance - loaded once at module import
config = ServerConfig.from_env()
