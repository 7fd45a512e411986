"""
Configuration Management for Table Organizer

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each group has its own environment prefix so a deployment can override
one concern (e.g. storage) without touching the others.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TableSettings(BaseSettings):
    """Bill computation and input limits."""
    
    model_config = SettingsConfigDict(
        env_prefix="TABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    default_tip: int = Field(
        default=0,
        ge=0,
        description="Tip percentage a new table session starts with"
    )
    currency_symbol: str = Field(
        default="$",
        min_length=1,
        max_length=5,
        description="Symbol printed in front of amounts"
    )
    max_quantity: int = Field(
        default=1000,
        ge=1,
        description="Largest quantity accepted for a single consumable"
    )
    max_price_cents: int = Field(
        default=1_000_000,
        ge=1,
        description="Unit prices above this are flagged as suspicious"
    )


class StorageSettings(BaseSettings):
    """Storage backend selection."""
    
    model_config = SettingsConfigDict(
        env_prefix="TABLE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    backend: str = Field(
        default="memory",
        pattern="^(memory|sqlite)$",
        description="Which storage implementation to use"
    )
    database_path: str = Field(
        default="tableorganizer.db",
        description="SQLite database file (used by the sqlite backend)"
    )
    
    @field_validator('database_path')
    @classmethod
    def validate_database_path(cls, v: str) -> str:
        """Warn if the parent directory is missing (sqlite will fail to open)."""
        if v != ":memory:" and not Path(v).expanduser().parent.exists():
            import warnings
            warnings.warn(
                f"Directory for database {v} does not exist. "
                "Create it before using the sqlite backend."
            )
        return v


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="TABLE_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level written to the log"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (otherwise console format)"
    )
    history_size: int = Field(
        default=200,
        ge=0,
        le=10_000,
        description="How many audit events to keep in memory"
    )
    
    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


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
    
    # Note: These are loaded lazily to allow partial configuration
    
    @property
    def table(self) -> TableSettings:
        return TableSettings()
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}, plus
    {setting_name_error: message} for each group that failed.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    for name in ("table", "storage", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
    
    return results
