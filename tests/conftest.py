"""Shared fixtures for Table Organizer tests."""

import os

import pytest

from table_organizer.audit import AuditLogger
from table_organizer.config import get_settings
from table_organizer.services.storage import (
    DuplicateError,
    InMemoryTableStorage,
    PersistenceError,
    SqliteTableStorage,
)
from table_organizer.table import TableManager


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """No .env file and no TABLE_* variables leak into a test."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("TABLE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FailingStorage(InMemoryTableStorage):
    """In-memory storage that rejects every insert."""
    
    def create_person(self, name: str) -> None:
        raise PersistenceError("disk full")
    
    def create_consumable(self, name: str, price: int, quantity: int) -> int:
        raise PersistenceError("disk full")


class UnreliableStorage(InMemoryTableStorage):
    """In-memory storage that accepts inserts until `failing` is switched on.

    Once failing, every delete, link, unlink and clear is rejected.
    """

    def __init__(self):
        super().__init__()
        self.failing = False

    def _check(self) -> None:
        if self.failing:
            raise PersistenceError("database is locked")

    def delete_person(self, name: str) -> None:
        self._check()

    def delete_consumable(self, consumable_id: int) -> None:
        self._check()

    def create_relation(self, person_name: str, consumable_id: int) -> None:
        self._check()

    def delete_relation(self, person_name: str, consumable_id: int) -> None:
        self._check()

    def clear_all(self) -> None:
        self._check()


class DuplicateRejectingStorage(InMemoryTableStorage):
    """Storage that already holds a person the table doesn't know about."""
    
    def create_person(self, name: str) -> None:
        raise DuplicateError(f"Person already stored: {name}")


@pytest.fixture
def audit_logger():
    return AuditLogger(history_size=50)


@pytest.fixture
def table(audit_logger):
    """A table that persists nothing."""
    return TableManager(storage=InMemoryTableStorage(), audit_logger=audit_logger)


@pytest.fixture
def database_path(tmp_path):
    return str(tmp_path / "table.db")


@pytest.fixture
def sqlite_storage(database_path):
    storage = SqliteTableStorage(database_path)
    yield storage
    storage.close()


@pytest.fixture
def sqlite_table(sqlite_storage, audit_logger):
    return TableManager(storage=sqlite_storage, audit_logger=audit_logger)


@pytest.fixture
def failing_table(audit_logger):
    """A table whose storage rejects every insert."""
    return TableManager(storage=FailingStorage(), audit_logger=audit_logger)


@pytest.fixture
def unreliable_storage():
    return UnreliableStorage()


@pytest.fixture
def unreliable_table(unreliable_storage, audit_logger):
    """A table with Ana and Bob sharing a beer; Bob also has fries.

    Switch `unreliable_storage.failing` on to make further writes fail.
    """
    table = TableManager(storage=unreliable_storage, audit_logger=audit_logger)
    ana = table.add_person("Ana")
    bob = table.add_person("Bob")
    beer = table.add_consumable("Beer", 500, 2)
    fries = table.add_consumable("Fries", 300, 1)
    table.add_consumable_to_person(beer, ana)
    table.add_consumable_to_person(beer, bob)
    table.add_consumable_to_person(fries, bob)
    return table


@pytest.fixture
def duplicate_rejecting_table(audit_logger):
    return TableManager(storage=DuplicateRejectingStorage(), audit_logger=audit_logger)
