"""
Form Input Validation

DESIGN DECISION: Raw form input (strings from the UI) is checked here
before anything reaches the table manager. Validation:
1. Never raises for bad input
2. Reports EVERY problem at once, one issue per field problem
3. Hands back parsed values (cents, ints) when the input is usable

Errors block the submission. Warnings are shown but don't block.
"""

from typing import Optional

from table_organizer.config import get_settings
from table_organizer.models.validation import (
    ConsumableDraft,
    ValidationIssue,
    ValidationResult,
)
from table_organizer.pricing import MAX_STORABLE_CENTS, parse_price, print_price


def _missing(field: str, label: str) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type="missing",
        message=f"{label} is required",
        severity="error",
    )


def _validate_name(field: str, label: str, text: Optional[str]) -> tuple[Optional[str], list[ValidationIssue]]:
    name = (text or "").strip()
    if not name:
        return None, [_missing(field, label)]
    return name, []


def _validate_quantity(text: Optional[str], max_quantity: int) -> tuple[Optional[int], list[ValidationIssue]]:
    raw = (text or "").strip()
    if not raw:
        return None, [_missing("quantity", "Quantity")]
    
    try:
        quantity = int(raw)
    except ValueError:
        return None, [ValidationIssue(
            field="quantity",
            issue_type="invalid_format",
            message=f"Quantity must be a whole number, got '{raw}'",
            severity="error",
            suggested_fix="Enter a number like 1 or 2",
        )]
    
    if quantity < 1:
        return None, [ValidationIssue(
            field="quantity",
            issue_type="out_of_range",
            message="Quantity must be at least 1",
            severity="error",
        )]
    if quantity > max_quantity:
        return None, [ValidationIssue(
            field="quantity",
            issue_type="out_of_range",
            message=f"Quantity cannot be more than {max_quantity}",
            severity="error",
        )]
    return quantity, []


def _validate_price(text: Optional[str], max_price_cents: int) -> tuple[Optional[int], list[ValidationIssue]]:
    raw = (text or "").strip()
    if not raw:
        return None, [_missing("price", "Price")]
    
    cents = parse_price(raw)
    if cents is None:
        return None, [ValidationIssue(
            field="price",
            issue_type="invalid_format",
            message=f"Price must be a number, got '{raw}'",
            severity="error",
            suggested_fix="Enter the unit price, e.g. 12.50",
        )]
    
    if cents < 0:
        return None, [ValidationIssue(
            field="price",
            issue_type="out_of_range",
            message="Price cannot be negative",
            severity="error",
        )]
    if cents > MAX_STORABLE_CENTS:
        return None, [ValidationIssue(
            field="price",
            issue_type="out_of_range",
            message="Price is too large to store",
            severity="error",
            suggested_fix="Check the decimal separator",
        )]
    
    issues = []
    if cents == 0:
        issues.append(ValidationIssue(
            field="price",
            issue_type="suspicious_value",
            message="Price is zero",
            severity="warning",
            suggested_fix="Check the price if this item was not free",
        ))
    elif cents > max_price_cents:
        issues.append(ValidationIssue(
            field="price",
            issue_type="suspicious_value",
            message=f"Price is unusually high ({print_price(cents)})",
            severity="warning",
            suggested_fix="Check the decimal separator",
        ))
    return cents, issues


def validate_consumable_input(
    name: Optional[str],
    quantity: Optional[str],
    price: Optional[str],
) -> ValidationResult:
    """
    Validate the add-consumable form.
    
    Args:
        name: Item name as typed
        quantity: Quantity as typed (whole number)
        price: Unit price as typed, in currency units ("12.34")
        
    Returns:
        ValidationResult whose value is a ConsumableDraft (price in
        cents) when there are no errors
    """
    settings = get_settings().table
    
    parsed_name, issues = _validate_name("name", "Name", name)
    parsed_quantity, quantity_issues = _validate_quantity(quantity, settings.max_quantity)
    parsed_price, price_issues = _validate_price(price, settings.max_price_cents)
    issues += quantity_issues + price_issues
    
    result = ValidationResult(issues=issues)
    if not result.has_errors:
        result.value = ConsumableDraft(
            name=parsed_name,
            price=parsed_price,
            quantity=parsed_quantity,
        )
    return result


def validate_person_input(
    name: Optional[str],
    existing_names: Optional[set[str]] = None,
) -> ValidationResult:
    """
    Validate the add-person form.
    
    Args:
        name: Name as typed
        existing_names: Names already at the table; a match is an error
    """
    parsed_name, issues = _validate_name("name", "Name", name)
    
    if parsed_name and existing_names and parsed_name in existing_names:
        issues.append(ValidationIssue(
            field="name",
            issue_type="duplicate",
            message=f"{parsed_name} is already at the table",
            severity="error",
            suggested_fix="Use a different name, e.g. add an initial",
        ))
    
    result = ValidationResult(issues=issues)
    if not result.has_errors:
        result.value = parsed_name
    return result
