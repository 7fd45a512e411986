"""
Application Wiring for Table Organizer

Builds the one table session the application works with.

DESIGN DECISION: There is no global table instance. The presentation
layer calls create_table_manager() once at start-up and keeps the
result (the Streamlit app caches it per process). Tests build their
own managers directly.
"""

from typing import Optional

import structlog

from table_organizer.audit import AuditLogger, configure_logging
from table_organizer.config import Settings, get_settings
from table_organizer.services.storage import (
    InMemoryTableStorage,
    SqliteTableStorage,
    StorageConnectionError,
    TableStorageInterface,
)
from table_organizer.table import TableManager


logger = structlog.get_logger(__name__)


def create_storage(settings: Optional[Settings] = None) -> TableStorageInterface:
    """
    Create the storage backend named by TABLE_STORAGE_BACKEND.
    
    Raises:
        StorageConnectionError: If the sqlite database cannot be opened
    """
    storage_settings = (settings or get_settings()).storage
    
    if storage_settings.backend == "sqlite":
        return SqliteTableStorage(storage_settings.database_path)
    return InMemoryTableStorage()


def create_table_manager(
    settings: Optional[Settings] = None,
    storage: Optional[TableStorageInterface] = None,
    fall_back_to_memory: bool = False,
) -> TableManager:
    """
    Factory function to create a table session.
    
    Args:
        settings: Settings to use (default: get_settings())
        storage: Use this backend instead of the configured one
        fall_back_to_memory: If the configured backend cannot be opened,
                             continue in memory instead of raising
                             
    Returns:
        A TableManager loaded with whatever storage already holds
    """
    settings = settings or get_settings()
    log_settings = settings.logging
    table_settings = settings.table
    
    configure_logging(log_settings.level, log_settings.json_output)
    
    if storage is None:
        try:
            storage = create_storage(settings)
        except StorageConnectionError as e:
            if not fall_back_to_memory:
                raise
            # Storage not usable - continue without it
            logger.warning("storage_unavailable", error=str(e))
            storage = InMemoryTableStorage()
    
    return TableManager(
        storage=storage,
        audit_logger=AuditLogger(history_size=log_settings.history_size),
        tip=table_settings.default_tip,
        currency_symbol=table_settings.currency_symbol,
    )
