"""Result types shared by schema and instance validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """A single validation failure.

    Attributes:
        slug: Field slug (or validator kind) the error relates to, None for form-level errors
        message: Human-readable message
        code: Machine-readable error code (e.g., "REQUIRED", "UNEXPECTED_FIELD")
    """

    slug: str | None
    message: str
    code: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "message": self.message,
            "code": self.code,
        }

    def __str__(self) -> str:
        return f"Slug: {self.slug}, Message: {self.message}"


@dataclass
class ValidationResult:
    """Result of a validation call.

    Attributes:
        valid: True if no errors accumulated
        errors: Errors in the order they were found
    """

    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[ValidationError]) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"valid": self.valid}
        if self.errors:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result
