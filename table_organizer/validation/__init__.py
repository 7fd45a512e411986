"""Form input validation package."""

from table_organizer.validation.validator import (
    validate_consumable_input,
    validate_person_input,
)

__all__ = ["validate_consumable_input", "validate_person_input"]
