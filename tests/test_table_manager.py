"""
Tests for the TableManager

Covers persons, consumables, links, bill computation and clear(),
all against in-memory storage, plus failure behaviour with storage
that rejects writes.
"""

import pytest
from pydantic import ValidationError

from table_organizer.models.audit import AuditEventType
from table_organizer.models.table import Consumable, Person
from table_organizer.services.storage import PersistenceError
from table_organizer.table import (
    DuplicatePersonError,
    EntityNotTrackedError,
    TableManager,
)


class TestPersons:
    """Adding, finding and removing persons."""
    
    def test_add_person(self, table):
        person = table.add_person("Ana")
        assert person.name == "Ana"
        assert table.get_number_of_persons() == 1
        assert table.get_person(0) is person
    
    def test_add_person_strips_name(self, table):
        table.add_person("  Ana ")
        assert table.get_person_by_name("Ana") is not None
    
    def test_add_duplicate_person_fails(self, table):
        table.add_person("Ana")
        with pytest.raises(DuplicatePersonError):
            table.add_person("Ana")
        assert table.get_number_of_persons() == 1
    
    def test_duplicate_after_stripping_fails(self, table):
        table.add_person("Ana")
        with pytest.raises(DuplicatePersonError):
            table.add_person(" Ana")
    
    def test_add_empty_name_fails(self, table):
        with pytest.raises(ValidationError):
            table.add_person("   ")
        assert table.get_number_of_persons() == 0
    
    def test_persons_keep_insertion_order(self, table):
        for name in ("Carla", "Ana", "Bruno"):
            table.add_person(name)
        assert [p.name for p in table.persons] == ["Carla", "Ana", "Bruno"]
        assert table.get_person(2).name == "Bruno"
    
    def test_get_person_out_of_range(self, table):
        table.add_person("Ana")
        with pytest.raises(IndexError):
            table.get_person(1)
        with pytest.raises(IndexError):
            table.get_person(-1)
    
    def test_remove_person(self, table):
        table.add_person("Ana")
        table.add_person("Bruno")
        assert table.remove_person("Ana") is True
        assert [p.name for p in table.persons] == ["Bruno"]
    
    def test_remove_person_twice_returns_false(self, table):
        table.add_person("Ana")
        assert table.remove_person("Ana") is True
        assert table.remove_person("Ana") is False
    
    def test_remove_unknown_person_changes_nothing(self, table):
        table.add_person("Ana")
        table.add_consumable("Beer", 500, 1)
        assert table.remove_person("Nobody") is False
        assert table.get_number_of_persons() == 1
        assert table.get_number_of_consumables() == 1
    
    def test_name_can_be_reused_after_removal(self, table):
        table.add_person("Ana")
        table.remove_person("Ana")
        assert table.add_person("Ana").name == "Ana"
    
    def test_long_name_is_accepted(self, table):
        table.add_person("p" * 600)
        assert table.get_person_by_name("p" * 600) is not None
    
    def test_lookup_and_remove_strip_the_name(self, table):
        ana = table.add_person(" Ana ")
        assert table.get_person_by_name(" Ana ") is ana
        assert table.remove_person(" Ana ") is True
        assert table.get_number_of_persons() == 0


class TestConsumables:
    """Adding, finding and removing consumables."""
    
    def test_add_consumable(self, table):
        consumable = table.add_consumable("Beer", 450, 2)
        assert consumable.id == 1
        assert consumable.total_price == 900
        assert table.get_consumable(0) is consumable
        assert table.get_consumable_by_id(1) is consumable
    
    def test_ids_increase_and_are_never_reused(self, table):
        first = table.add_consumable("Beer", 450, 1)
        second = table.add_consumable("Fries", 300, 1)
        table.remove_consumable(second.id)
        third = table.add_consumable("Wine", 2000, 1)
        assert (first.id, second.id, third.id) == (1, 2, 3)
    
    def test_ids_are_not_reused_after_clear(self, table):
        table.add_consumable("Beer", 450, 1)
        table.clear()
        assert table.add_consumable("Beer", 450, 1).id == 2
    
    def test_zero_price_is_allowed(self, table):
        assert table.add_consumable("Water", 0, 1).total_price == 0
    
    def test_rejects_negative_price(self, table):
        with pytest.raises(ValueError):
            table.add_consumable("Beer", -1, 1)
        assert table.get_number_of_consumables() == 0
    
    def test_rejects_zero_quantity(self, table):
        with pytest.raises(ValueError):
            table.add_consumable("Beer", 100, 0)
    
    def test_long_name_is_accepted(self, table, audit_logger):
        name = "Chef's tasting menu " * 30
        consumable = table.add_consumable(name, 9900, 1)
        assert consumable.name == name.strip()
        latest = audit_logger.recent_events(limit=1)[0]
        assert latest.event_type == AuditEventType.CONSUMABLE_ADDED
    
    def test_remove_consumable(self, table):
        consumable = table.add_consumable("Beer", 450, 1)
        assert table.remove_consumable(consumable.id) is True
        assert table.get_number_of_consumables() == 0
        assert table.get_consumable_by_id(consumable.id) is None
    
    def test_remove_unknown_consumable_returns_false(self, table):
        table.add_consumable("Beer", 450, 1)
        assert table.remove_consumable(99) is False
        assert table.get_number_of_consumables() == 1
    
    def test_get_consumable_out_of_range(self, table):
        with pytest.raises(IndexError):
            table.get_consumable(0)


class TestRelations:
    """Linking persons and consumables."""
    
    def test_link_updates_both_sides(self, table):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(beer, ana)
        assert ana.consumable_ids == {beer.id}
        assert beer.person_names == {"Ana"}
        assert table.consumers_of(beer) == (ana,)
        assert table.consumables_of(ana) == (beer,)
    
    def test_link_with_none_is_a_no_op(self, table):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(None, ana)
        table.add_consumable_to_person(beer, None)
        assert ana.consumable_ids == set()
        assert beer.person_names == set()
    
    def test_link_untracked_person_fails(self, table):
        beer = table.add_consumable("Beer", 500, 1)
        with pytest.raises(EntityNotTrackedError):
            table.add_consumable_to_person(beer, Person(name="Ghost"))
        assert beer.person_names == set()
    
    def test_link_untracked_consumable_fails(self, table):
        ana = table.add_person("Ana")
        with pytest.raises(EntityNotTrackedError):
            table.add_consumable_to_person(Consumable(id=42, name="Ghost", price=1), ana)
    
    def test_link_by_equal_copy_uses_tracked_entity(self, table):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(beer.model_copy(), Person(name="Ana"))
        assert beer.person_names == {"Ana"}
        assert ana.consumable_ids == {beer.id}
    
    def test_linking_twice_is_idempotent(self, table):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(beer, ana)
        table.add_consumable_to_person(beer, ana)
        assert beer.number_of_consumers == 1
    
    def test_unlink(self, table):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(beer, ana)
        table.remove_consumable_from_person(beer, ana)
        assert ana.consumable_ids == set()
        assert beer.person_names == set()
    
    def test_unlink_pair_that_was_never_linked(self, table):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.remove_consumable_from_person(beer, ana)
        table.remove_consumable_from_person(None, ana)
        assert table.get_total_bill() == 500
    
    def test_removing_consumable_unlinks_persons(self, table):
        ana = table.add_person("Ana")
        bruno = table.add_person("Bruno")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(beer, ana)
        table.add_consumable_to_person(beer, bruno)
        table.remove_consumable(beer.id)
        assert ana.consumable_ids == set()
        assert bruno.consumable_ids == set()
        assert table.get_personal_bill(ana) == 0
    
    def test_removing_person_unlinks_consumables(self, table):
        ana = table.add_person("Ana")
        bruno = table.add_person("Bruno")
        beer = table.add_consumable("Beer", 1000, 1)
        table.add_consumable_to_person(beer, ana)
        table.add_consumable_to_person(beer, bruno)
        table.remove_person("Ana")
        assert beer.person_names == {"Bruno"}
        assert table.get_personal_bill(bruno) == 1000


class TestBill:
    """Totals, personal bills and tip."""
    
    def test_total_bill_sums_total_prices(self, table):
        table.add_consumable("Beer", 450, 3)
        table.add_consumable("Fries", 300, 1)
        assert table.get_total_bill() == 1350 + 300
    
    def test_empty_table_has_zero_bill(self, table):
        assert table.get_total_bill() == 0
        assert table.get_total_bill_with_tip() == 0
    
    def test_personal_bill_without_links_is_zero(self, table):
        ana = table.add_person("Ana")
        table.add_consumable("Beer", 500, 1)
        assert table.get_personal_bill(ana) == 0
    
    def test_split_between_two(self, table):
        ana = table.add_person("Ana")
        bruno = table.add_person("Bruno")
        wine = table.add_consumable("Wine", 1000, 1)
        table.add_consumable_to_person(wine, ana)
        table.add_consumable_to_person(wine, bruno)
        assert table.get_personal_bill(ana) == 500
        assert table.get_personal_bill(bruno) == 500
    
    def test_split_between_three_loses_a_cent(self, table):
        persons = [table.add_person(name) for name in ("Ana", "Bruno", "Carla")]
        wine = table.add_consumable("Wine", 1000, 1)
        for person in persons:
            table.add_consumable_to_person(wine, person)
        bills = [table.get_personal_bill(person) for person in persons]
        assert bills == [333, 333, 333]
        assert sum(bills) == 999
    
    def test_default_tip_is_zero(self, table):
        assert table.tip == 0
    
    def test_negative_tip_is_clamped(self, table):
        table.set_tip(-5)
        assert table.get_tip() == 0
    
    def test_tip_setter_clamps_too(self, table):
        table.tip = -1
        assert table.tip == 0
    
    def test_total_with_tip(self, table):
        table.add_consumable("Dinner", 1000, 1)
        table.set_tip(10)
        assert table.get_total_bill_with_tip() == 1100
    
    def test_total_with_tip_rounds_down(self, table):
        table.add_consumable("Coffee", 999, 1)
        table.set_tip(15)
        # 999 * 115 / 100 = 1148.85
        assert table.get_total_bill_with_tip() == 1148
    
    def test_personal_bill_with_tip(self, table):
        ana = table.add_person("Ana")
        bruno = table.add_person("Bruno")
        wine = table.add_consumable("Wine", 1000, 1)
        table.add_consumable_to_person(wine, ana)
        table.add_consumable_to_person(wine, bruno)
        table.set_tip(10)
        assert table.get_personal_bill(ana) == 550
    
    def test_initial_tip_from_constructor(self):
        assert TableManager(tip=12).tip == 12
        assert TableManager(tip=-3).tip == 0
    
    def test_print_price(self, table):
        assert table.print_price(5) == "$0.05"
        assert table.print_price(1234) == "$12.34"
    
    def test_print_price_uses_currency_symbol(self):
        assert TableManager(currency_symbol="€").print_price(250) == "€2.50"


class TestBillSummary:
    """The summary used by the bill screen."""
    
    def test_summary(self, table):
        ana = table.add_person("Ana")
        bruno = table.add_person("Bruno")
        carla = table.add_person("Carla")
        wine = table.add_consumable("Wine", 1000, 1)
        table.add_consumable("Bread", 250, 2)
        for person in (ana, bruno, carla):
            table.add_consumable_to_person(wine, person)
        table.set_tip(10)
        
        summary = table.get_bill_summary()
        
        assert summary.total == 1500
        assert summary.total_with_tip == 1650
        assert summary.unassigned_total == 500
        assert summary.rounding_loss == 1
        assert [p.name for p in summary.persons] == ["Ana", "Bruno", "Carla"]
        assert summary.persons[0].subtotal == 333
        assert summary.persons[0].total == 366
        assert summary.persons[0].consumable_ids == [wine.id]
        assert summary.assigned_total + summary.unassigned_total + summary.rounding_loss == summary.total
    
    def test_summary_of_empty_table(self, table):
        summary = table.get_bill_summary()
        assert summary.total == 0
        assert summary.persons == []


class TestClear:
    """Emptying the table."""
    
    def test_clear_empties_everything(self, table):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(beer, ana)
        table.clear()
        assert table.get_number_of_persons() == 0
        assert table.get_number_of_consumables() == 0
        assert table.get_total_bill() == 0
    
    def test_clear_keeps_tip(self, table):
        table.set_tip(15)
        table.clear()
        assert table.tip == 15


class TestStorageFailures:
    """Nothing is added in memory when storage rejects a write."""
    
    def test_add_person_failure_leaves_table_unchanged(self, failing_table):
        with pytest.raises(PersistenceError):
            failing_table.add_person("Ana")
        assert failing_table.get_number_of_persons() == 0
    
    def test_add_consumable_failure_leaves_table_unchanged(self, failing_table):
        with pytest.raises(PersistenceError):
            failing_table.add_consumable("Beer", 500, 1)
        assert failing_table.get_number_of_consumables() == 0
    
    def test_storage_duplicate_becomes_duplicate_person(self, duplicate_rejecting_table):
        with pytest.raises(DuplicatePersonError):
            duplicate_rejecting_table.add_person("Ana")
        assert duplicate_rejecting_table.get_number_of_persons() == 0
    
    def test_failures_are_audited(self, failing_table, audit_logger):
        with pytest.raises(PersistenceError):
            failing_table.add_consumable("Beer", 500, 1)
        latest = audit_logger.recent_events(limit=1)[0]
        assert latest.event_type == AuditEventType.PERSISTENCE_FAILED


def _graph(table):
    """Names, ids and both sides of every link, for before/after comparison."""
    return (
        [p.name for p in table.persons],
        [c.id for c in table.consumables],
        {p.name: set(p.consumable_ids) for p in table.persons},
        {c.id: set(c.person_names) for c in table.consumables},
    )


class TestFailedChangesLeaveTableIntact:
    """Removals, links, unlinks and clear are all-or-nothing too."""

    def _fail(self, table, storage, audit_logger, operation, *args):
        before = _graph(table)
        storage.failing = True
        with pytest.raises(PersistenceError):
            operation(*args)
        assert _graph(table) == before
        latest = audit_logger.recent_events(limit=1)[0]
        assert latest.event_type == AuditEventType.PERSISTENCE_FAILED
        return latest

    def test_remove_person(self, unreliable_table, unreliable_storage, audit_logger):
        event = self._fail(
            unreliable_table, unreliable_storage, audit_logger,
            unreliable_table.remove_person, "Bob",
        )
        assert event.details["operation"] == "remove_person"
        assert unreliable_table.get_person_by_name("Bob").consumable_ids == {1, 2}

    def test_remove_consumable(self, unreliable_table, unreliable_storage, audit_logger):
        event = self._fail(
            unreliable_table, unreliable_storage, audit_logger,
            unreliable_table.remove_consumable, 1,
        )
        assert event.details["operation"] == "remove_consumable"
        assert unreliable_table.get_consumable_by_id(1).person_names == {"Ana", "Bob"}

    def test_link(self, unreliable_table, unreliable_storage, audit_logger):
        fries = unreliable_table.get_consumable_by_id(2)
        ana = unreliable_table.get_person_by_name("Ana")
        event = self._fail(
            unreliable_table, unreliable_storage, audit_logger,
            unreliable_table.add_consumable_to_person, fries, ana,
        )
        assert event.details["operation"] == "add_consumable_to_person"
        assert not fries.is_consumed_by("Ana")
        assert 2 not in ana.consumable_ids

    def test_unlink(self, unreliable_table, unreliable_storage, audit_logger):
        beer = unreliable_table.get_consumable_by_id(1)
        ana = unreliable_table.get_person_by_name("Ana")
        event = self._fail(
            unreliable_table, unreliable_storage, audit_logger,
            unreliable_table.remove_consumable_from_person, beer, ana,
        )
        assert event.details["operation"] == "remove_consumable_from_person"
        assert beer.is_consumed_by("Ana")
        assert 1 in ana.consumable_ids

    def test_clear(self, unreliable_table, unreliable_storage, audit_logger):
        event = self._fail(
            unreliable_table, unreliable_storage, audit_logger,
            unreliable_table.clear,
        )
        assert event.details["operation"] == "clear"
        assert unreliable_table.get_number_of_persons() == 2
        assert unreliable_table.get_number_of_consumables() == 2

    def test_table_works_again_once_storage_recovers(
        self, unreliable_table, unreliable_storage
    ):
        unreliable_storage.failing = True
        with pytest.raises(PersistenceError):
            unreliable_table.remove_person("Ana")
        unreliable_storage.failing = False
        assert unreliable_table.remove_person("Ana")
        assert unreliable_table.get_consumable_by_id(1).person_names == {"Bob"}


class TestAuditTrail:
    """Mutations show up in the audit history."""
    
    def test_mutations_are_recorded(self, table, audit_logger):
        ana = table.add_person("Ana")
        beer = table.add_consumable("Beer", 500, 1)
        table.add_consumable_to_person(beer, ana)
        table.set_tip(10)
        table.remove_person("Ana")
        
        types = [e.event_type for e in reversed(audit_logger.recent_events())]
        assert types == [
            AuditEventType.TABLE_LOADED,
            AuditEventType.PERSON_ADDED,
            AuditEventType.CONSUMABLE_ADDED,
            AuditEventType.RELATION_ADDED,
            AuditEventType.TIP_CHANGED,
            AuditEventType.PERSON_REMOVED,
        ]
    
    def test_duplicate_is_recorded(self, table, audit_logger):
        table.add_person("Ana")
        with pytest.raises(DuplicatePersonError):
            table.add_person("Ana")
        latest = audit_logger.recent_events(limit=1)[0]
        assert latest.event_type == AuditEventType.DUPLICATE_PERSON_REJECTED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
