"""
Table Manager

The one owner of everything at the table: persons, consumables, the
links between them and the tip.

DESIGN DECISION: Persons and consumables live in id-keyed arenas
(dicts keep insertion order, which is also display order). Links are
mirrored id sets on both entities, and this class is the only code
that touches both sides.

Every mutation goes to storage FIRST. If storage raises, the in-memory
state has not been touched, so an operation is either fully applied or
not applied at all.

Not thread-safe: callers must serialize access.
"""

from typing import Optional

import structlog

from table_organizer.audit import AuditLogger
from table_organizer.models.audit import AuditEventBuilder
from table_organizer.models.table import (
    BillSummary,
    Consumable,
    Person,
    PersonBill,
)
from table_organizer.pricing import apply_tip, clamp_tip, print_price, split_evenly
from table_organizer.services.storage import (
    DuplicateError,
    InMemoryTableStorage,
    PersistenceError,
    TableStorageInterface,
)
from table_organizer.table.exceptions import (
    DuplicatePersonError,
    EntityNotTrackedError,
)


logger = structlog.get_logger(__name__)


class TableManager:
    """
    A single table session.
    
    Build one at application start (see orchestrator.create_table_manager)
    and hand it to whatever needs it.
    """
    
    def __init__(
        self,
        storage: Optional[TableStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        tip: int = 0,
        currency_symbol: str = "$",
    ):
        """
        Initialize the table and load whatever storage already holds.
        
        Args:
            storage: Storage backend. If None, nothing is persisted.
            audit_logger: Where mutations are recorded. If None, a
                          local-only logger is created.
            tip: Starting tip percentage (negative becomes 0)
            currency_symbol: Used by print_price
        """
        self._storage = storage or InMemoryTableStorage()
        self._audit = audit_logger or AuditLogger()
        self._tip = clamp_tip(tip)
        self._currency_symbol = currency_symbol
        
        self._persons: dict[str, Person] = {}
        self._consumables: dict[int, Consumable] = {}
        
        self._load()
    
    def _load(self) -> None:
        """Rebuild the graph: persons, then consumables, then relations."""
        for person in self._storage.fetch_persons():
            self._persons[person.name] = person
        for consumable in self._storage.fetch_consumables():
            self._consumables[consumable.id] = consumable
        
        relations = self._storage.fetch_relations()
        skipped = 0
        for relation in relations:
            person = self._persons.get(relation.person)
            consumable = self._consumables.get(relation.consumable)
            if person is None or consumable is None:
                skipped += 1
                logger.debug(
                    "relation_skipped",
                    person=relation.person,
                    consumable=relation.consumable,
                )
                continue
            self._link(consumable, person)
        
        self._audit.log(AuditEventBuilder.table_loaded(
            persons=len(self._persons),
            consumables=len(self._consumables),
            relations=len(relations) - skipped,
            skipped=skipped,
        ))
    
    @property
    def storage(self) -> TableStorageInterface:
        return self._storage
    
    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit
    
    # =========================================================================
    # TIP
    # =========================================================================
    
    @property
    def tip(self) -> int:
        """Tip percentage, never negative."""
        return self._tip
    
    @tip.setter
    def tip(self, value: int) -> None:
        self.set_tip(value)
    
    def get_tip(self) -> int:
        return self._tip
    
    def set_tip(self, tip: int) -> None:
        """Set the tip percentage. Negative values are stored as 0."""
        old = self._tip
        self._tip = clamp_tip(tip)
        if self._tip != old:
            self._audit.log(AuditEventBuilder.tip_changed(old, self._tip, tip))
    
    # =========================================================================
    # BILL
    # =========================================================================
    
    def get_total_bill(self) -> int:
        """Total of all consumables, in cents, before tip."""
        return sum(consumable.total_price for consumable in self._consumables.values())
    
    def get_total_bill_with_tip(self) -> int:
        return apply_tip(self.get_total_bill(), self._tip)
    
    def get_personal_bill(self, person: Person) -> int:
        """
        What one person owes, tip included, in cents.
        
        Each linked item is split evenly among its consumers; the
        remainder of an uneven split is dropped.
        """
        tracked = self._persons.get(person.name, person)
        return apply_tip(tracked.get_personal_bill(self._consumables), self._tip)
    
    def get_bill_summary(self) -> BillSummary:
        """Everything the bill screen needs in one object."""
        unassigned = 0
        rounding_loss = 0
        for consumable in self._consumables.values():
            share, remainder = split_evenly(
                consumable.total_price, consumable.number_of_consumers
            )
            if consumable.number_of_consumers:
                rounding_loss += remainder
            else:
                unassigned += remainder
        
        persons = []
        for person in self._persons.values():
            subtotal = person.get_personal_bill(self._consumables)
            persons.append(PersonBill(
                name=person.name,
                subtotal=subtotal,
                total=apply_tip(subtotal, self._tip),
                consumable_ids=[c.id for c in self.consumables_of(person)],
            ))
        
        total = self.get_total_bill()
        return BillSummary(
            tip=self._tip,
            total=total,
            total_with_tip=apply_tip(total, self._tip),
            persons=persons,
            unassigned_total=unassigned,
            rounding_loss=rounding_loss,
        )
    
    def print_price(self, cents: int) -> str:
        return print_price(cents, self._currency_symbol)
    
    def _persist(self, operation: str, details: dict, call, *args) -> None:
        """Run one storage write; audit and re-raise if storage rejects it."""
        try:
            call(*args)
        except PersistenceError as e:
            self._audit.log(AuditEventBuilder.persistence_failed(
                operation, str(e), details
            ))
            raise
    
    # =========================================================================
    # PERSONS
    # =========================================================================
    
    def add_person(self, name: str) -> Person:
        """
        Seat a new person at the table.
        
        Raises:
            DuplicatePersonError: If the name is already taken
            PersistenceError: If storage rejects the insert
            pydantic.ValidationError: If the name is empty
        """
        person = Person(name=name)
        
        if person.name in self._persons:
            self._audit.log(AuditEventBuilder.duplicate_person_rejected(person.name))
            raise DuplicatePersonError(person.name)
        
        try:
            self._storage.create_person(person.name)
        except DuplicateError:
            self._audit.log(AuditEventBuilder.duplicate_person_rejected(person.name))
            raise DuplicatePersonError(person.name)
        except PersistenceError as e:
            self._audit.log(AuditEventBuilder.persistence_failed(
                "add_person", str(e), {"name": person.name}
            ))
            raise
        
        self._persons[person.name] = person
        self._audit.log(AuditEventBuilder.person_added(person.name))
        return person
    
    def remove_person(self, name: str) -> bool:
        """
        Remove a person and every link they had.
        
        Returns False if nobody has that name.
        """
        name = name.strip()
        person = self._persons.get(name)
        if person is None:
            return False
        
        self._persist(
            "remove_person", {"name": name}, self._storage.delete_person, name
        )
        
        unlinked = sorted(person.consumable_ids)
        for consumable_id in unlinked:
            consumable = self._consumables.get(consumable_id)
            if consumable is not None:
                consumable.remove_person(name)
        person.consumable_ids.clear()
        del self._persons[name]
        
        self._audit.log(AuditEventBuilder.person_removed(name, unlinked))
        return True
    
    def get_person_by_name(self, name: str) -> Optional[Person]:
        return self._persons.get(name.strip())
    
    def get_number_of_persons(self) -> int:
        return len(self._persons)
    
    def get_person(self, position: int) -> Person:
        """Person at `position` in insertion order. IndexError if out of range."""
        if position < 0:
            raise IndexError(f"person position out of range: {position}")
        return list(self._persons.values())[position]
    
    @property
    def persons(self) -> tuple[Person, ...]:
        return tuple(self._persons.values())
    
    # =========================================================================
    # CONSUMABLES
    # =========================================================================
    
    def add_consumable(self, name: str, price: int, quantity: int = 1) -> Consumable:
        """
        Add an item to the bill.
        
        Args:
            name: What was ordered
            price: Unit price in cents (>= 0)
            quantity: Units ordered (>= 1)
            
        Raises:
            PersistenceError: If storage rejects the insert
            ValueError: If price or quantity is out of range
        """
        if price < 0:
            raise ValueError(f"price must not be negative: {price}")
        if quantity < 1:
            raise ValueError(f"quantity must be at least 1: {quantity}")
        name = name.strip()
        if not name:
            raise ValueError("consumable name must not be empty")
        
        try:
            consumable_id = self._storage.create_consumable(name, price, quantity)
        except PersistenceError as e:
            self._audit.log(AuditEventBuilder.persistence_failed(
                "add_consumable",
                str(e),
                {"name": name, "price": price, "quantity": quantity},
            ))
            raise
        
        consumable = Consumable(
            id=consumable_id,
            name=name,
            price=price,
            quantity=quantity,
        )
        self._consumables[consumable.id] = consumable
        self._audit.log(AuditEventBuilder.consumable_added(
            consumable.id, name, price, quantity
        ))
        return consumable
    
    def remove_consumable(self, consumable_id: int) -> bool:
        """
        Remove an item and every link to it.
        
        Returns False if there is no such id.
        """
        consumable = self._consumables.get(consumable_id)
        if consumable is None:
            return False
        
        self._persist(
            "remove_consumable",
            {"consumable": consumable_id},
            self._storage.delete_consumable,
            consumable_id,
        )
        
        unlinked = [p.name for p in self.consumers_of(consumable)]
        for name in unlinked:
            self._persons[name].remove_consumable(consumable_id)
        consumable.person_names.clear()
        del self._consumables[consumable_id]
        
        self._audit.log(AuditEventBuilder.consumable_removed(consumable_id, unlinked))
        return True
    
    def get_consumable_by_id(self, consumable_id: int) -> Optional[Consumable]:
        return self._consumables.get(consumable_id)
    
    def get_number_of_consumables(self) -> int:
        return len(self._consumables)
    
    def get_consumable(self, position: int) -> Consumable:
        """Consumable at `position` in insertion order. IndexError if out of range."""
        if position < 0:
            raise IndexError(f"consumable position out of range: {position}")
        return list(self._consumables.values())[position]
    
    @property
    def consumables(self) -> tuple[Consumable, ...]:
        return tuple(self._consumables.values())
    
    # =========================================================================
    # RELATIONS
    # =========================================================================
    
    def _tracked(
        self,
        consumable: Consumable,
        person: Person,
    ) -> tuple[Optional[Consumable], Optional[Person]]:
        return (
            self._consumables.get(consumable.id),
            self._persons.get(person.name),
        )
    
    def _link(self, consumable: Consumable, person: Person) -> None:
        consumable.add_person(person.name)
        person.add_consumable(consumable.id)
    
    def add_consumable_to_person(
        self,
        consumable: Optional[Consumable],
        person: Optional[Person],
    ) -> None:
        """
        Record that `person` shares `consumable`.
        
        Does nothing if either argument is None.
        
        Raises:
            EntityNotTrackedError: If either is not part of this table
            PersistenceError: If storage rejects the link
        """
        if consumable is None or person is None:
            return
        
        tracked_consumable, tracked_person = self._tracked(consumable, person)
        if tracked_consumable is None:
            raise EntityNotTrackedError(f"Consumable {consumable.id} is not on this table")
        if tracked_person is None:
            raise EntityNotTrackedError(f"Person {person.name} is not on this table")
        
        if tracked_consumable.is_consumed_by(tracked_person.name):
            return
        
        self._persist(
            "add_consumable_to_person",
            {"person": tracked_person.name, "consumable": tracked_consumable.id},
            self._storage.create_relation,
            tracked_person.name,
            tracked_consumable.id,
        )
        self._link(tracked_consumable, tracked_person)
        self._audit.log(AuditEventBuilder.relation_added(
            tracked_person.name, tracked_consumable.id
        ))
    
    def remove_consumable_from_person(
        self,
        consumable: Optional[Consumable],
        person: Optional[Person],
    ) -> None:
        """Undo add_consumable_to_person. Unknown or unlinked pairs are ignored."""
        if consumable is None or person is None:
            return
        
        tracked_consumable, tracked_person = self._tracked(consumable, person)
        if tracked_consumable is None or tracked_person is None:
            return
        if not tracked_consumable.is_consumed_by(tracked_person.name):
            return
        
        self._persist(
            "remove_consumable_from_person",
            {"person": tracked_person.name, "consumable": tracked_consumable.id},
            self._storage.delete_relation,
            tracked_person.name,
            tracked_consumable.id,
        )
        tracked_consumable.remove_person(tracked_person.name)
        tracked_person.remove_consumable(tracked_consumable.id)
        self._audit.log(AuditEventBuilder.relation_removed(
            tracked_person.name, tracked_consumable.id
        ))
    
    def consumers_of(self, consumable: Consumable) -> tuple[Person, ...]:
        """Persons sharing `consumable`, in table order."""
        tracked = self._consumables.get(consumable.id)
        if tracked is None:
            return ()
        return tuple(
            person for person in self._persons.values()
            if person.name in tracked.person_names
        )
    
    def consumables_of(self, person: Person) -> tuple[Consumable, ...]:
        """Consumables `person` shares, in table order."""
        tracked = self._persons.get(person.name)
        if tracked is None:
            return ()
        return tuple(
            consumable for consumable in self._consumables.values()
            if consumable.id in tracked.consumable_ids
        )
    
    # =========================================================================
    # WHOLE TABLE
    # =========================================================================
    
    def clear(self) -> None:
        """Empty the table, in memory and in storage."""
        self._persist("clear", {}, self._storage.clear_all)
        
        persons = len(self._persons)
        consumables = len(self._consumables)
        self._persons.clear()
        self._consumables.clear()
        
        self._audit.log(AuditEventBuilder.table_cleared(persons, consumables))
    
    def close(self) -> None:
        self._storage.close()
