"""
Data Models Package

Pydantic models for the table: the entities, bill summaries,
form validation results and audit events.
"""

from table_organizer.models.table import (
    BillSummary,
    Consumable,
    ConsumesRelation,
    Person,
    PersonBill,
)
from table_organizer.models.validation import (
    ConsumableDraft,
    ValidationIssue,
    ValidationResult,
)
from table_organizer.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Table models
    "BillSummary",
    "Consumable",
    "ConsumesRelation",
    "Person",
    "PersonBill",
    # Validation models
    "ConsumableDraft",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
