"""Engine configuration using environment variables."""
import logging
import os
from functools import lru_cache
from dotenv import load_dotenv

from combat_ai.core.errors import ConfigurationError

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            message=f"{name} must be an integer, got {raw!r}",
            details={"variable": name, "value": raw},
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Engine settings loaded from environment variables."""

    def __init__(self):
        # Decision making
        self.DIFFICULTY: str = os.getenv("COMBAT_AI_DIFFICULTY", "standard").lower()
        self.RECORD_OWN_ACTIONS: bool = _env_bool("COMBAT_AI_RECORD_OWN_ACTIONS", True)

        # Memory
        self.HISTORY_WINDOW: int = _env_int("COMBAT_AI_HISTORY_WINDOW", 10)
        self.RECENT_ACTIONS: int = _env_int("COMBAT_AI_RECENT_ACTIONS", 3)

        # Grid
        self.FEET_PER_SQUARE: int = _env_int("COMBAT_AI_FEET_PER_SQUARE", 5)

        # Logging
        self.LOG_LEVEL: str = os.getenv("COMBAT_AI_LOG_LEVEL", "INFO").upper()

        if self.HISTORY_WINDOW < 1:
            raise ConfigurationError(
                message="COMBAT_AI_HISTORY_WINDOW must be at least 1",
                details={"variable": "COMBAT_AI_HISTORY_WINDOW", "value": self.HISTORY_WINDOW},
            )
        if self.FEET_PER_SQUARE < 1:
            raise ConfigurationError(
                message="COMBAT_AI_FEET_PER_SQUARE must be at least 1",
                details={"variable": "COMBAT_AI_FEET_PER_SQUARE", "value": self.FEET_PER_SQUARE},
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """Apply the configured log level to the package logger."""
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    logging.getLogger("combat_ai").setLevel(level)
