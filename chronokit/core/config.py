"""
Library configuration module.
Loads environment variables and provides library-wide settings.
"""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get project root (two levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables or .env file.
    (Note: Environment variables take precedence over .env file)

    Every variable is read with the CHRONOKIT_ prefix,
    e.g. CHRONOKIT_DEFAULT_TIMEZONE=Europe/London
    """
    # Calendar
    DEFAULT_TIMEZONE: str = ""  # IANA zone name; empty means the host's local zone
    LOCALE: str = "en"  # Babel locale used for month and AM/PM names

    # Formatters
    FORMATTER_CACHE_SIZE: int = 128

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False

    # Project
    PROJECT_NAME: str = "chronokit"
    VERSION: str = "0.1.0"

    model_config = SettingsConfigDict(
        env_prefix="CHRONOKIT_",
        env_file=str(PROJECT_ROOT / ".env"),
        case_sensitive=True,
        env_file_encoding='utf-8',
        extra='ignore',
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get settings instance.

    Settings are read once and shared by every date operation. Call
    ``get_settings.cache_clear()`` after changing the environment (e.g. in
    tests) to load them again.

    Returns:
        Settings: Library settings
    """
    return Settings()
