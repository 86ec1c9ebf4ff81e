"""Base model and coercing field types.

Every possync value object inherits from :class:`PosBaseModel` which provides:

* frozen instances (value objects are never mutated after construction)
* ``populate_by_name`` so both the server's camelCase keys and snake_case
  field names are accepted
* a ``model_validator(mode="before")`` that strips placeholder values
  (``None``, ``""``, ``"--"``, NaN) so the field default is used

Numeric fields use :data:`Money`, :data:`Amount` or :data:`Quantity`, which
coerce malformed input to zero instead of failing validation.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from possync._normalize import round_money, to_decimal, to_int

_PLACEHOLDERS = frozenset({"", "--", "NaN", "nan"})


def _money(value: Any) -> Decimal:
    return round_money(to_decimal(value))


def _non_negative_int(value: Any) -> int:
    return max(to_int(value), 0)


def parse_instant(value: Any) -> datetime:
    """Parse an ISO-8601 string or datetime into a timezone-aware datetime.

    Naive values are interpreted as UTC. A trailing ``Z`` is accepted.
    Raises :class:`ValueError` for anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"expected ISO-8601 string or datetime, got {type(value).__name__}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


Money = Annotated[Decimal, BeforeValidator(_money)]
"""Decimal amount rounded to cents; malformed input becomes ``0.00``."""

Amount = Annotated[Decimal, BeforeValidator(to_decimal)]
"""Unrounded decimal; malformed input becomes ``0``."""

Quantity = Annotated[int, BeforeValidator(_non_negative_int)]
"""Non-negative integer count; malformed or negative input becomes ``0``."""

Instant = Annotated[datetime, BeforeValidator(parse_instant)]
"""Timezone-aware datetime parsed from ISO-8601."""


class PosBaseModel(BaseModel):
    """Base for possync value objects."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_placeholders(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _PLACEHOLDERS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned
