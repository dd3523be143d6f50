"""
Centralized configuration for the Mandala server.

Configuration is loaded from environment variables, falling back to
defaults.

Usage:
    from mandala.config import Settings
    settings = Settings.from_env()
    print(settings.port)
"""

import os
from dataclasses import dataclass, field


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


@dataclass
class Settings:
    """Server settings. The engine itself takes no configuration."""
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    # Rooms older than this are dropped by RoomManager.cleanup_stale_rooms()
    room_max_age_seconds: int = 2 * 60 * 60

    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=get_env("MANDALA_ENV", "development"),
            log_level=get_env("MANDALA_LOG_LEVEL", "INFO"),
            host=get_env("MANDALA_HOST", "0.0.0.0"),
            port=get_env_int("MANDALA_PORT", 3000),
            room_max_age_seconds=get_env_int("MANDALA_ROOM_MAX_AGE", 2 * 60 * 60),
            allowed_origins=[
                origin.strip()
                for origin in get_env("ALLOWED_ORIGINS", "*").split(",")
                if origin.strip()
            ],
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
