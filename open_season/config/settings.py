"""Configuration settings for Open Season."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# NOTE: load_dotenv() is called in CLI main.py for faster module imports
# from dotenv import load_dotenv
# load_dotenv()


@dataclass
class LookupConfig:
    """Configuration for the USAspending award lookup."""

    base_url: str = "https://api.usaspending.gov"
    timeout: float = 30.0  # Seconds
    min_award_amount: float = 100_000.0
    award_type_codes: tuple[str, ...] = ("A", "B", "C", "D")  # Contracts
    limit: int = 10


@dataclass
class Settings:
    """Main settings container."""

    lookup: LookupConfig = field(default_factory=LookupConfig)

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        settings = cls()

        if url := os.getenv("USASPENDING_BASE_URL"):
            settings.lookup.base_url = url.rstrip("/")

        if timeout := os.getenv("USASPENDING_TIMEOUT"):
            settings.lookup.timeout = float(timeout)

        if log_level := os.getenv("LOG_LEVEL"):
            settings.log_level = log_level

        if log_file := os.getenv("OPEN_SEASON_LOG_FILE"):
            settings.log_file = Path(log_file)

        return settings


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Set the global settings instance (None reloads from the environment)."""
    global _settings
    _settings = settings
