"""Record validators for the CRUD layer.

Each validator accepts a plain mapping (form state or decoded JSON) and
returns a :class:`ValidationResult` listing every failed rule.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from possync._normalize import to_float
from possync.models.validation import ValidationResult

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
PRICE_RE = re.compile(r"^\d+(\.\d{1,2})?$")
PERCENTAGE_RE = re.compile(r"^(100(\.0{1,2})?|[1-9]?\d(\.\d{1,2})?)$")

USER_ROLES = frozenset({"admin", "manager", "staff"})
ORDER_TYPES = frozenset({"dine_in", "takeaway", "delivery"})
TABLE_STATUSES = frozenset({"available", "occupied", "reserved", "maintenance"})


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _present(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    return value is not None and value != "" and value != 0


def validate_user(data: Mapping[str, Any]) -> ValidationResult:
    errors: list[str] = []
    if len(_text(data, "username")) < 3:
        errors.append("Username must be at least 3 characters long")
    if not EMAIL_RE.match(_text(data, "email")):
        errors.append("Valid email address is required")
    if len(_text(data, "full_name")) < 2:
        errors.append("Full name must be at least 2 characters long")
    if data.get("role") not in USER_ROLES:
        errors.append("Invalid user role")
    phone = _text(data, "phone")
    if phone and not PHONE_RE.match(phone):
        errors.append("Phone number is invalid")
    return ValidationResult.from_errors(errors)


def validate_product(data: Mapping[str, Any]) -> ValidationResult:
    errors: list[str] = []
    if len(_text(data, "name")) < 2:
        errors.append("Product name must be at least 2 characters long")
    if to_float(data.get("price")) <= 0:
        errors.append("Product price must be greater than 0")
    if to_float(data.get("cost")) < 0:
        errors.append("Product cost cannot be negative")
    if not _present(data, "category_id"):
        errors.append("Product category is required")
    return ValidationResult.from_errors(errors)


def validate_order(data: Mapping[str, Any]) -> ValidationResult:
    errors: list[str] = []
    if not data.get("items"):
        errors.append("Order must contain at least one item")
    order_type = data.get("order_type")
    if order_type not in ORDER_TYPES:
        errors.append("Invalid order type")
    if order_type == "dine_in" and not _present(data, "table_id"):
        errors.append("Table is required for dine-in orders")
    if order_type == "delivery" and not _present(data, "customer_phone"):
        errors.append("Customer phone is required for delivery orders")
    return ValidationResult.from_errors(errors)


def validate_table(data: Mapping[str, Any]) -> ValidationResult:
    errors: list[str] = []
    if not str(data.get("table_number") or ""):
        errors.append("Table number is required")
    if to_float(data.get("capacity")) < 1:
        errors.append("Table capacity must be at least 1")
    if data.get("status") not in TABLE_STATUSES:
        errors.append("Invalid table status")
    return ValidationResult.from_errors(errors)


def validate_inventory(data: Mapping[str, Any]) -> ValidationResult:
    errors: list[str] = []
    if not _present(data, "product_id"):
        errors.append("Product ID is required")
    if to_float(data.get("current_stock")) < 0:
        errors.append("Current stock cannot be negative")
    minimum = to_float(data.get("minimum_stock"))
    if minimum < 0:
        errors.append("Minimum stock cannot be negative")
    maximum = data.get("maximum_stock")
    if maximum is not None and to_float(maximum) < minimum:
        errors.append("Maximum stock cannot be less than minimum stock")
    return ValidationResult.from_errors(errors)


def is_valid_price(value: Any) -> bool:
    """Whether *value* reads as a non-negative price with at most two decimals."""
    return bool(PRICE_RE.match(str(value).strip()))


def is_valid_percentage(value: Any) -> bool:
    """Whether *value* reads as 0-100 with at most two decimals."""
    return bool(PERCENTAGE_RE.match(str(value).strip()))
