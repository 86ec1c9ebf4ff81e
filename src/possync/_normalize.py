"""Normalization helpers.

Centralizes defensive numeric parsing. The UI layer hands over partially
filled form state, so every helper here degrades malformed input to zero
instead of raising.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Placeholder strings treated as "no value".
_PLACEHOLDERS = frozenset({"", "--", "NaN", "nan", "null", "undefined"})


def to_decimal(value: Any) -> Decimal:
    """Coerce *value* to a finite :class:`Decimal`, or ``0``.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return ZERO
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if text in _PLACEHOLDERS:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
        return result if result.is_finite() else ZERO
    return ZERO


def to_float(value: Any) -> float:
    """Coerce *value* to a finite float, or ``0.0``."""
    if isinstance(value, float):
        return value if math.isfinite(value) else 0.0
    return float(to_decimal(value))


def to_int(value: Any) -> int:
    """Coerce *value* to an int (truncating toward zero), or ``0``."""
    return int(to_decimal(value))


def round_money(value: Decimal) -> Decimal:
    """Round to cents using round-half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
