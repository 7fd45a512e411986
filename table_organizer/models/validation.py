"""
Validation Models

Structured results for checking raw form input before it reaches the
table manager. Validation never raises for bad input; it reports issues
so the presentation layer can show them next to the right field.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""
    
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ConsumableDraft(BaseModel):
    """Parsed consumable input, ready for TableManager.add_consumable."""
    
    name: str = Field(..., min_length=1)
    price: int = Field(..., ge=0, description="Unit price in cents")
    quantity: int = Field(..., ge=1)


class ValidationResult(BaseModel):
    """
    Result of validating one form submission.
    
    value holds the parsed input when there are no errors.
    Warnings don't block.
    """
    
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    value: Optional[ConsumableDraft | str] = Field(
        default=None,
        description="Parsed input (a ConsumableDraft or a person name)"
    )
    
    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)
    
    @property
    def is_valid(self) -> bool:
        return not self.has_errors
    
    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
    
    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
    
    def errors_for(self, field: str) -> list[ValidationIssue]:
        """Error-level issues for one field."""
        return [
            issue for issue in self.issues
            if issue.field == field and issue.severity == "error"
        ]
