"""
In-Memory Storage

The table lives only in the TableManager; every persistence call is a
no-op and every fetch comes back empty. The one thing kept here is the
id counter, so consumable ids are allocated the same way whichever
backend is in use.
"""

from table_organizer.models.table import Consumable, ConsumesRelation, Person
from table_organizer.services.storage.interface import TableStorageInterface


class InMemoryTableStorage(TableStorageInterface):
    """Storage for sessions that don't need to survive a restart."""
    
    def __init__(self, first_id: int = 1):
        self._next_id = first_id
    
    def create_person(self, name: str) -> None:
        pass
    
    def delete_person(self, name: str) -> None:
        pass
    
    def fetch_persons(self) -> list[Person]:
        return []
    
    def create_consumable(self, name: str, price: int, quantity: int) -> int:
        consumable_id = self._next_id
        self._next_id += 1
        return consumable_id
    
    def delete_consumable(self, consumable_id: int) -> None:
        pass
    
    def fetch_consumables(self) -> list[Consumable]:
        return []
    
    def create_relation(self, person_name: str, consumable_id: int) -> None:
        pass
    
    def delete_relation(self, person_name: str, consumable_id: int) -> None:
        pass
    
    def fetch_relations(self) -> list[ConsumesRelation]:
        return []
    
    def clear_all(self) -> None:
        # Ids are never reused, so the counter survives a clear.
        pass
