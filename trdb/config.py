"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .currency import Currency


DB_NAME = ".trdb"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_database_path() -> Path:
    """The ledger file in the user's home directory"""
    return Path.home() / DB_NAME


class LedgerConfig(BaseSettings):
    """trdb ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="TRDB_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Storage configuration
    database_path: Path = Field(default_factory=default_database_path)

    # Display configuration
    currency: str = Currency.EUR.code

    # Logging configuration
    log_level: str = "ERROR"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    @field_validator("database_path")
    @classmethod
    def _expand_home(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("currency")
    @classmethod
    def _known_currency(cls, value: str) -> str:
        code = value.strip().upper()
        if code not in Currency.__members__:
            known = ", ".join(Currency.__members__)
            raise ValueError(f"Unknown currency '{value}' (supported: {known})")
        return code

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return value


# Global configuration instance, built on first use
config: Optional[LedgerConfig] = None


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    global config
    if config is None:
        config = LedgerConfig()
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
