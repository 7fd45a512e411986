"""
Audit Models for Table Organizer

Every mutation of the table is recorded as an audit event.
This provides:
1. Traceability of who was added, linked and removed
2. Debugging information when storage rejects a write
3. A short history the UI can show

DESIGN DECISION: Audit events are immutable once built.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Persons
    PERSON_ADDED = "person_added"
    PERSON_REMOVED = "person_removed"
    DUPLICATE_PERSON_REJECTED = "duplicate_person_rejected"
    
    # Consumables
    CONSUMABLE_ADDED = "consumable_added"
    CONSUMABLE_REMOVED = "consumable_removed"
    
    # Relations
    RELATION_ADDED = "relation_added"
    RELATION_REMOVED = "relation_removed"
    
    # Table
    TIP_CHANGED = "tip_changed"
    TABLE_LOADED = "table_loaded"
    TABLE_CLEARED = "table_cleared"
    
    # Failures
    PERSISTENCE_FAILED = "persistence_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.
    
    entity_type/entity_id say what the event is about: a person
    (id is the name) or a consumable (id is the numeric id).
    """
    model_config = ConfigDict(frozen=True)
    
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO
    entity_type: Optional[str] = Field(
        default=None,
        description="'person', 'consumable', 'relation' or 'table'"
    )
    entity_id: Optional[str] = None
    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    
    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.
    
    Usage:
        event = AuditEventBuilder.person_added("Ana")
        event = AuditEventBuilder.relation_added("Ana", 3)
    """
    
    @staticmethod
    def person_added(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_ADDED,
            entity_type="person",
            entity_id=name,
            description=f"Person added: {name}",
        )
    
    @staticmethod
    def person_removed(name: str, unlinked: list[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSON_REMOVED,
            entity_type="person",
            entity_id=name,
            description=f"Person removed: {name}",
            details={"unlinked_consumables": unlinked},
        )
    
    @staticmethod
    def duplicate_person_rejected(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_PERSON_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="person",
            entity_id=name,
            description=f"Person already exists: {name}",
        )
    
    @staticmethod
    def consumable_added(
        consumable_id: int,
        name: str,
        price: int,
        quantity: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONSUMABLE_ADDED,
            entity_type="consumable",
            entity_id=str(consumable_id),
            description=f"Consumable added: {quantity} x {name}",
            details={
                "name": name,
                "price": price,
                "quantity": quantity,
            },
        )
    
    @staticmethod
    def consumable_removed(consumable_id: int, unlinked: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONSUMABLE_REMOVED,
            entity_type="consumable",
            entity_id=str(consumable_id),
            description=f"Consumable removed: {consumable_id}",
            details={"unlinked_persons": unlinked},
        )
    
    @staticmethod
    def relation_added(person: str, consumable_id: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RELATION_ADDED,
            entity_type="relation",
            entity_id=f"{person}:{consumable_id}",
            description=f"{person} shares consumable {consumable_id}",
        )
    
    @staticmethod
    def relation_removed(person: str, consumable_id: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RELATION_REMOVED,
            entity_type="relation",
            entity_id=f"{person}:{consumable_id}",
            description=f"{person} no longer shares consumable {consumable_id}",
        )
    
    @staticmethod
    def tip_changed(old: int, new: int, requested: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TIP_CHANGED,
            entity_type="table",
            description=f"Tip changed from {old}% to {new}%",
            details={
                "old": old,
                "new": new,
                "requested": requested,
            },
        )
    
    @staticmethod
    def table_loaded(
        persons: int,
        consumables: int,
        relations: int,
        skipped: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TABLE_LOADED,
            entity_type="table",
            description=f"Table loaded: {persons} persons, {consumables} consumables",
            details={
                "persons": persons,
                "consumables": consumables,
                "relations": relations,
                "skipped_relations": skipped,
            },
        )
    
    @staticmethod
    def table_cleared(persons: int, consumables: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TABLE_CLEARED,
            entity_type="table",
            description="Table cleared",
            details={
                "persons": persons,
                "consumables": consumables,
            },
        )
    
    @staticmethod
    def persistence_failed(
        operation: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Storage rejected {operation}",
            error_message=error_message,
            details={"operation": operation, **(details or {})},
        )
