"""Services package."""

from table_organizer.services.storage import (
    DuplicateError,
    InMemoryTableStorage,
    PersistenceError,
    SqliteTableStorage,
    StorageConnectionError,
    StorageError,
    TableStorageInterface,
)

__all__ = [
    "DuplicateError",
    "InMemoryTableStorage",
    "PersistenceError",
    "SqliteTableStorage",
    "StorageConnectionError",
    "StorageError",
    "TableStorageInterface",
]
