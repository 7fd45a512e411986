"""Table session package."""

from table_organizer.table.exceptions import (
    DuplicatePersonError,
    EntityNotTrackedError,
    TableError,
)
from table_organizer.table.manager import TableManager

__all__ = [
    "DuplicatePersonError",
    "EntityNotTrackedError",
    "TableError",
    "TableManager",
]
