"""ValidationResult data model representing form-layer validation of a document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ValidationIssue:
    """A single validation finding.

    Attributes:
        message: Human readable description
        field: Field the issue refers to (Python attribute name), or None
        line_index: Index of the offending line, or None for document-level issues
    """

    message: str
    field: Optional[str] = None
    line_index: Optional[int] = None

    def __str__(self) -> str:
        if self.line_index is None:
            return self.message
        return f"Line {self.line_index + 1}: {self.message}"


@dataclass
class ValidationResult:
    """Validation result for a document snapshot.

    Attributes:
        status: "OK" when there are no errors, otherwise "REVIEW"
        errors: Issues that block submission
        warnings: Issues worth showing but not blocking
    """

    status: str
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    def __post_init__(self):
        """Validate ValidationResult fields."""
        if self.status not in ["OK", "REVIEW"]:
            raise ValueError(f"status must be 'OK' or 'REVIEW', got '{self.status}'")

        if self.status == "OK" and self.errors:
            raise ValueError("status 'OK' cannot carry errors")

    @property
    def passed(self) -> bool:
        return self.status == "OK"

    def errors_for_line(self, line_index: int) -> List[ValidationIssue]:
        return [issue for issue in self.errors if issue.line_index == line_index]
