"""
Storage Services Package

Provides the abstract storage interface and its two implementations:
in-memory (nothing persisted) and SQLite (durable).
"""

from table_organizer.services.storage.interface import (
    DuplicateError,
    PersistenceError,
    StorageConnectionError,
    StorageError,
    TableStorageInterface,
)
from table_organizer.services.storage.memory import InMemoryTableStorage
from table_organizer.services.storage.sqlite import SqliteTableStorage

__all__ = [
    # Interface
    "TableStorageInterface",
    # Exceptions
    "DuplicateError",
    "PersistenceError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryTableStorage",
    "SqliteTableStorage",
]
