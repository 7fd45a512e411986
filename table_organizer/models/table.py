"""
Table Domain Models

Persons, consumables and the relation between them.

DESIGN DECISION: The relation is stored as ids on both sides
(a person keeps consumable ids, a consumable keeps person names)
instead of object references. The table manager owns the arenas
that resolve those ids and is the only place that keeps both sides
in sync. The methods here only ever touch their own side.

All amounts are integer cents.
"""

from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


class Consumable(BaseModel):
    """
    An item ordered at the table.
    
    Its total price is split evenly among the persons currently
    linked to it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)
    
    id: int = Field(
        ...,
        ge=1,
        description="Unique id, allocated by storage"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="What was ordered"
    )
    price: int = Field(
        ...,
        ge=0,
        description="Unit price in cents"
    )
    quantity: int = Field(
        default=1,
        ge=1,
        description="How many units were ordered"
    )
    person_names: set[str] = Field(
        default_factory=set,
        description="Names of the persons sharing this item"
    )
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Consumable):
            return NotImplemented
        return self.id == other.id
    
    def __hash__(self) -> int:
        return hash(("consumable", self.id))
    
    @property
    def total_price(self) -> int:
        """Unit price times quantity, in cents."""
        return self.price * self.quantity
    
    @property
    def number_of_consumers(self) -> int:
        return len(self.person_names)
    
    @property
    def share_per_person(self) -> int:
        """
        Each consumer's share of this item, in cents.
        
        Integer division: the remainder is lost (see BillSummary.rounding_loss).
        An item nobody consumed has no share.
        """
        if not self.person_names:
            return 0
        return self.total_price // len(self.person_names)
    
    def add_person(self, name: str) -> None:
        self.person_names.add(name)
    
    def remove_person(self, name: str) -> None:
        self.person_names.discard(name)
    
    def is_consumed_by(self, name: str) -> bool:
        return name in self.person_names


class Person(BaseModel):
    """A named participant at the table. The name is the identity."""
    model_config = ConfigDict(str_strip_whitespace=True)
    
    name: str = Field(
        ...,
        min_length=1,
        description="Unique name of the person"
    )
    consumable_ids: set[int] = Field(
        default_factory=set,
        description="Ids of the consumables this person shares"
    )
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Person):
            return NotImplemented
        return self.name == other.name
    
    def __hash__(self) -> int:
        return hash(("person", self.name))
    
    def add_consumable(self, consumable_id: int) -> None:
        self.consumable_ids.add(consumable_id)
    
    def remove_consumable(self, consumable_id: int) -> None:
        self.consumable_ids.discard(consumable_id)
    
    def get_personal_bill(self, consumables: Mapping[int, Consumable]) -> int:
        """
        Sum of this person's shares, in cents, before tip.
        
        Args:
            consumables: The table's consumables keyed by id.
                         Ids missing from it contribute nothing.
        """
        total = 0
        for consumable_id in self.consumable_ids:
            consumable = consumables.get(consumable_id)
            if consumable is not None:
                total += consumable.share_per_person
        return total


class ConsumesRelation(BaseModel):
    """One stored (person, consumable) link."""
    
    person: str = Field(..., min_length=1)
    consumable: int = Field(..., ge=1)


class PersonBill(BaseModel):
    """A person's line in the bill summary."""
    
    name: str
    subtotal: int = Field(..., ge=0, description="Share before tip, in cents")
    total: int = Field(..., ge=0, description="Share including tip, in cents")
    consumable_ids: list[int] = Field(default_factory=list)


class BillSummary(BaseModel):
    """
    The whole bill at a glance.
    
    rounding_loss is the sum of the remainders dropped when splitting
    items that don't divide evenly. unassigned_total covers items
    nobody has been linked to yet. Neither is charged to anyone.
    """
    
    tip: int = Field(..., ge=0)
    total: int = Field(..., ge=0, description="Total before tip, in cents")
    total_with_tip: int = Field(..., ge=0)
    persons: list[PersonBill] = Field(default_factory=list)
    unassigned_total: int = Field(default=0, ge=0)
    rounding_loss: int = Field(default=0, ge=0)
    
    @property
    def assigned_total(self) -> int:
        """What the persons pay together before tip."""
        return sum(person.subtotal for person in self.persons)
