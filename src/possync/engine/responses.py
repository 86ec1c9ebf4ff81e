"""Builders for the generic API response envelope."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from possync.models.responses import ApiResponse
from possync.models.validation import ValidationResult


def _utcnow() -> datetime:
    return datetime.now(UTC)


def format_response(
    success: bool,
    data: Any = None,
    message: str = "",
    errors: list[str] | None = None,
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> ApiResponse:
    return ApiResponse(
        success=success,
        data=data,
        message=message,
        errors=list(errors or []),
        timestamp=clock(),
    )


def format_success_response(
    data: Any,
    message: str = "Success",
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message, errors=[], timestamp=clock())


def format_error_response(
    message: str,
    errors: list[str] | str | None = None,
    status_code: int = 400,
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> ApiResponse:
    """Failure envelope. A single error string is wrapped in a list."""
    if errors is None:
        error_list: list[str] = []
    elif isinstance(errors, str):
        error_list = [errors]
    else:
        error_list = list(errors)
    return ApiResponse(
        success=False,
        data=None,
        message=message,
        errors=error_list,
        status_code=status_code,
        timestamp=clock(),
    )


def validation_response(
    result: ValidationResult,
    data: Any = None,
    *,
    message: str = "Validation failed",
    status_code: int = 422,
    clock: Callable[[], datetime] = _utcnow,
) -> ApiResponse:
    """Surface a validator result: success envelope with *data* when valid."""
    if result.is_valid:
        return format_success_response(data, clock=clock)
    return format_error_response(message, result.errors, status_code, clock=clock)
