"""
SQLite Storage Implementation

DESIGN DECISION: SQLite is used as the durable backend because:
1. It ships with Python, no server to run
2. One file per table session, easy to delete or back up
3. Real transactions, so each write is all-or-nothing

Schema (one row per person, per consumable, per link):
    Person(name)                         - name is the primary key
    Consumable(id, name, price, quantity) - id AUTOINCREMENT, never reused
    Consumes(person, consumable)         - unique pair, both foreign keys

The schema version lives in PRAGMA user_version. A file with another
version is wiped and recreated.
"""

import sqlite3
from typing import Optional

import structlog

from table_organizer.models.table import Consumable, ConsumesRelation, Person
from table_organizer.services.storage.interface import (
    DuplicateError,
    PersistenceError,
    StorageConnectionError,
    TableStorageInterface,
)


SCHEMA_VERSION = 3

PERSON_TABLE = "Person"
CONSUMABLE_TABLE = "Consumable"
CONSUMES_TABLE = "Consumes"

CREATE_PERSON = (
    "CREATE TABLE IF NOT EXISTS Person("
    "name TEXT PRIMARY KEY NOT NULL UNIQUE)"
)
CREATE_CONSUMABLE = (
    "CREATE TABLE IF NOT EXISTS Consumable("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "name TEXT NOT NULL, "
    "price INTEGER NOT NULL, "
    "quantity INTEGER NOT NULL)"
)
CREATE_CONSUMES = (
    "CREATE TABLE IF NOT EXISTS Consumes("
    "person TEXT NOT NULL, "
    "consumable INTEGER NOT NULL, "
    "FOREIGN KEY(person) REFERENCES Person(name), "
    "FOREIGN KEY(consumable) REFERENCES Consumable(id), "
    "UNIQUE(person, consumable))"
)

logger = structlog.get_logger(__name__)


class SqliteTableStorage(TableStorageInterface):
    """
    SQLite implementation of table storage.
    
    Every write runs in its own transaction (the connection's context
    manager commits on success and rolls back on error).
    """
    
    def __init__(self, database_path: str = "tableorganizer.db"):
        self._database_path = database_path
        self._conn: Optional[sqlite3.Connection] = None
        self.connect()
    
    def connect(self) -> sqlite3.Connection:
        """Open the database and make sure the schema is current."""
        if self._conn is None:
            try:
                # The Streamlit app shares one session across script threads.
                conn = sqlite3.connect(self._database_path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON")
                self._ensure_schema(conn)
            except sqlite3.Error as e:
                raise StorageConnectionError(
                    f"Failed to open database {self._database_path}: {e}"
                )
            self._conn = conn
        return self._conn
    
    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        with conn:
            if version != SCHEMA_VERSION:
                if version:
                    logger.warning(
                        "schema_version_mismatch",
                        found=version,
                        expected=SCHEMA_VERSION,
                        database=self._database_path,
                    )
                conn.execute(f"DROP TABLE IF EXISTS {CONSUMES_TABLE}")
                conn.execute(f"DROP TABLE IF EXISTS {PERSON_TABLE}")
                conn.execute(f"DROP TABLE IF EXISTS {CONSUMABLE_TABLE}")
            conn.execute(CREATE_PERSON)
            conn.execute(CREATE_CONSUMABLE)
            conn.execute(CREATE_CONSUMES)
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    
    @property
    def schema_version(self) -> int:
        return self.connect().execute("PRAGMA user_version").fetchone()[0]
    
    def _write(self, operation: str, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        conn = self.connect()
        try:
            with conn:
                return conn.execute(sql, params)
        except (sqlite3.Error, OverflowError) as e:
            # OverflowError: integers wider than SQLite's 64-bit INTEGER
            raise PersistenceError(f"Could not {operation}: {e}")
    
    def create_person(self, name: str) -> None:
        conn = self.connect()
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO {PERSON_TABLE} (name) VALUES (?)",
                    (name,),
                )
        except sqlite3.IntegrityError:
            raise DuplicateError(f"Person already stored: {name}")
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not insert person {name}: {e}")
    
    def delete_person(self, name: str) -> None:
        conn = self.connect()
        try:
            with conn:
                conn.execute(f"DELETE FROM {CONSUMES_TABLE} WHERE person = ?", (name,))
                conn.execute(f"DELETE FROM {PERSON_TABLE} WHERE name = ?", (name,))
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not delete person {name}: {e}")
    
    def fetch_persons(self) -> list[Person]:
        rows = self.connect().execute(
            f"SELECT name FROM {PERSON_TABLE} ORDER BY rowid"
        ).fetchall()
        return [Person(name=row["name"]) for row in rows]
    
    def create_consumable(self, name: str, price: int, quantity: int) -> int:
        cursor = self._write(
            "insert consumable",
            f"INSERT INTO {CONSUMABLE_TABLE} (name, price, quantity) VALUES (?, ?, ?)",
            (name, price, quantity),
        )
        if cursor.lastrowid is None:
            raise PersistenceError(f"Could not insert consumable {name}")
        return cursor.lastrowid
    
    def delete_consumable(self, consumable_id: int) -> None:
        conn = self.connect()
        try:
            with conn:
                conn.execute(
                    f"DELETE FROM {CONSUMES_TABLE} WHERE consumable = ?",
                    (consumable_id,),
                )
                conn.execute(
                    f"DELETE FROM {CONSUMABLE_TABLE} WHERE id = ?",
                    (consumable_id,),
                )
        except (sqlite3.Error, OverflowError) as e:
            raise PersistenceError(f"Could not delete consumable {consumable_id}: {e}")
    
    def fetch_consumables(self) -> list[Consumable]:
        rows = self.connect().execute(
            f"SELECT id, name, price, quantity FROM {CONSUMABLE_TABLE} ORDER BY id"
        ).fetchall()
        return [
            Consumable(
                id=row["id"],
                name=row["name"],
                price=row["price"],
                quantity=row["quantity"],
            )
            for row in rows
        ]
    
    def create_relation(self, person_name: str, consumable_id: int) -> None:
        self._write(
            "insert relation",
            f"INSERT OR IGNORE INTO {CONSUMES_TABLE} (person, consumable) VALUES (?, ?)",
            (person_name, consumable_id),
        )
    
    def delete_relation(self, person_name: str, consumable_id: int) -> None:
        self._write(
            "delete relation",
            f"DELETE FROM {CONSUMES_TABLE} WHERE person = ? AND consumable = ?",
            (person_name, consumable_id),
        )
    
    def fetch_relations(self) -> list[ConsumesRelation]:
        rows = self.connect().execute(
            f"SELECT person, consumable FROM {CONSUMES_TABLE} ORDER BY rowid"
        ).fetchall()
        return [
            ConsumesRelation(person=row["person"], consumable=row["consumable"])
            for row in rows
        ]
    
    def clear_all(self) -> None:
        conn = self.connect()
        try:
            with conn:
                conn.execute(f"DELETE FROM {CONSUMES_TABLE}")
                conn.execute(f"DELETE FROM {PERSON_TABLE}")
                conn.execute(f"DELETE FROM {CONSUMABLE_TABLE}")
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not clear table: {e}")
    
    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
