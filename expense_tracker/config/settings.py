"""
Configuration Management for the Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Every setting has a default. The tracker runs with no
environment at all; variables and the .env file only override.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where and how the persistence backends keep their data."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the primary store and the SQLite file"
    )
    primary_filename: str = Field(
        default="local_storage.json",
        description="File backing the primary key-value store"
    )
    structured_filename: str = Field(
        default="expense_tracker.db",
        description="SQLite file backing the structured record store"
    )
    structured_enabled: bool = Field(
        default=True,
        description="Attach the structured record backend"
    )

    # Key names inside the key-value stores
    expenses_key: str = Field(default="expenses")
    budget_key: str = Field(default="budget")
    snapshot_key: str = Field(
        default="expense_backup",
        description="Key of the base64 snapshot in the primary store"
    )
    budget_sentinel_key: str = Field(
        default="budget",
        description="Row id reserved for the budget in the structured store"
    )

    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for transient write failures"
    )

    @field_validator('budget_sentinel_key')
    @classmethod
    def sentinel_not_numeric(cls, v: str) -> str:
        """Record ids are integers, so the sentinel must never parse as one."""
        if v.strip().lstrip("-").isdigit():
            raise ValueError("Budget sentinel key must not look like a record id")
        return v

    @property
    def primary_path(self) -> Path:
        return self.data_dir / self.primary_filename

    @property
    def structured_path(self) -> Path:
        return self.data_dir / self.structured_filename


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    locale: str = Field(
        default="gu",
        pattern="^(gu|en)$",
        description="Language for notifications, month names and CSV headers"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False for console output)"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
