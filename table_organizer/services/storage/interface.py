"""
Abstract Storage Interface

DESIGN DECISION: The table manager talks to storage only through this
interface. This allows us to:
1. Run fully in memory (nothing survives a restart)
2. Persist to SQLite so a table survives the app being closed
3. Inject failing backends in tests

Calls are synchronous. The table manager calls storage BEFORE touching
its in-memory state, so a raised error means nothing changed.
"""

from abc import ABC, abstractmethod

from table_organizer.models.table import Consumable, ConsumesRelation, Person


class TableStorageInterface(ABC):
    """
    Abstract interface for table storage operations.
    
    Any storage implementation (in-memory, SQLite, etc.)
    must implement these methods.
    """
    
    @abstractmethod
    def create_person(self, name: str) -> None:
        """
        Store a new person.
        
        Raises:
            DuplicateError: If a person with this name is already stored
            PersistenceError: If the insert is rejected for any other reason
        """
        pass
    
    @abstractmethod
    def delete_person(self, name: str) -> None:
        """Delete a person and every relation naming them."""
        pass
    
    @abstractmethod
    def fetch_persons(self) -> list[Person]:
        """
        Load all stored persons, in insertion order.
        
        Returned persons carry no relations; those come from fetch_relations.
        """
        pass
    
    @abstractmethod
    def create_consumable(self, name: str, price: int, quantity: int) -> int:
        """
        Store a new consumable.
        
        Returns:
            The id allocated for it. Ids increase monotonically
            and are never reused.
            
        Raises:
            PersistenceError: If the insert is rejected
        """
        pass
    
    @abstractmethod
    def delete_consumable(self, consumable_id: int) -> None:
        """Delete a consumable and every relation naming it."""
        pass
    
    @abstractmethod
    def fetch_consumables(self) -> list[Consumable]:
        """Load all stored consumables, in id order."""
        pass
    
    @abstractmethod
    def create_relation(self, person_name: str, consumable_id: int) -> None:
        """Store a person-consumable link. Storing it twice is a no-op."""
        pass
    
    @abstractmethod
    def delete_relation(self, person_name: str, consumable_id: int) -> None:
        """Delete a person-consumable link."""
        pass
    
    @abstractmethod
    def fetch_relations(self) -> list[ConsumesRelation]:
        """Load all stored links, in insertion order."""
        pass
    
    @abstractmethod
    def clear_all(self) -> None:
        """Delete all relations, persons and consumables."""
        pass
    
    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """The store rejected a write."""
    pass


class DuplicateError(PersistenceError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not open the storage backend."""
    pass
