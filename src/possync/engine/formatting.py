"""Display formatting, identifiers and input sanitization."""

from __future__ import annotations

import secrets
import string
import time
from typing import Any

from possync._normalize import round_money, to_decimal

_BASE36 = string.digits + string.ascii_lowercase

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "LKR": "Rs",
}


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _now_ms() -> int:
    return int(time.time() * 1000)


def format_currency(amount: Any, currency: str = "USD") -> str:
    """Format *amount* as ``$1,234.50``.

    Currencies without a known symbol use the ISO code as a prefix
    (``CHF 10.00``).
    """
    code = currency.upper()
    value = round_money(to_decimal(amount))
    symbol = _CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def sanitize_input(value: Any) -> Any:
    """Trim strings and strip angle brackets; other values pass through."""
    if not isinstance(value, str):
        return value
    return value.strip().replace("<", "").replace(">", "")


def generate_order_number(now_ms: int | None = None) -> str:
    """Return ``ORD-<base36 millis>-<5 random base36 chars>`` in upper case."""
    timestamp = _base36(now_ms if now_ms is not None else _now_ms())
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"ORD-{timestamp}-{suffix}".upper()


def generate_sku(category_code: str, product_name: str, now_ms: int | None = None) -> str:
    """Return ``<CATEGORY>-<NAME6>-<TS4>`` in upper case."""
    name_code = "".join(ch for ch in product_name if ch.isascii() and ch.isalnum())[:6]
    timestamp = _base36(now_ms if now_ms is not None else _now_ms())[-4:]
    return f"{category_code}-{name_code}-{timestamp}".upper()
