"""Configuration package."""

from table_organizer.config.settings import (
    LoggingSettings,
    Settings,
    StorageSettings,
    TableSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "LoggingSettings",
    "Settings",
    "StorageSettings",
    "TableSettings",
    "get_settings",
    "validate_all_settings",
]
