"""Structured validation results.

Validators return these instead of raising so callers can render
field-level feedback directly.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> ValidationResult:
        return cls(is_valid=not errors, errors=list(errors))


class DateRangeError(StrEnum):
    INVALID_FORMAT = "invalid_format"
    INVERTED_RANGE = "inverted_range"
    RANGE_TOO_LARGE = "range_too_large"


class DateRangeValidation(ValidationResult):
    reason: DateRangeError | None = None
