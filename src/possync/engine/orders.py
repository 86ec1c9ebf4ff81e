"""Order totals and margin calculations."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from possync._normalize import ZERO, round_money, to_decimal, to_float, to_int
from possync.models.order import DiscountType, OrderLine, OrderTotals

_HUNDRED = Decimal(100)


def _line_values(item: OrderLine | Mapping[str, Any] | Any) -> tuple[Decimal, Decimal]:
    if isinstance(item, OrderLine):
        return Decimal(item.quantity), item.unit_price
    if isinstance(item, Mapping):
        quantity = item.get("quantity", item.get("qty"))
        unit_price = item.get("unit_price", item.get("price"))
    else:
        quantity = getattr(item, "quantity", None)
        unit_price = getattr(item, "unit_price", None)
    # Whole non-negative quantities and non-negative prices, as OrderLine enforces.
    return Decimal(max(to_int(quantity), 0)), max(to_decimal(unit_price), ZERO)


def calculate_subtotal(items: Iterable[OrderLine | Mapping[str, Any]]) -> Decimal:
    """Unrounded ``sum(quantity * unit_price)``."""
    subtotal = ZERO
    for item in items:
        quantity, unit_price = _line_values(item)
        subtotal += quantity * unit_price
    return subtotal


def calculate_order_totals(
    items: Iterable[OrderLine | Mapping[str, Any]],
    tax_rate: Any = 0,
    discount_amount: Any = 0,
    discount_type: DiscountType | str = DiscountType.FIXED,
) -> OrderTotals:
    """Compute subtotal, discount, tax and total for an order.

    Intermediate values stay unrounded; only the four returned fields are
    rounded (half-up, to cents). The discount is clamped to ``[0, subtotal]``
    and a negative tax rate counts as zero.
    """
    subtotal = calculate_subtotal(items)
    rate = max(to_decimal(tax_rate), ZERO)
    amount = to_decimal(discount_amount)

    if discount_type == DiscountType.PERCENTAGE:
        raw_discount = subtotal * amount / _HUNDRED
    else:
        raw_discount = amount

    discount = min(max(raw_discount, ZERO), max(subtotal, ZERO))
    taxable = max(subtotal - discount, ZERO)
    tax = taxable * rate / _HUNDRED
    total = taxable + tax

    return OrderTotals(
        subtotal=round_money(subtotal),
        discount_amount=round_money(discount),
        tax_amount=round_money(tax),
        total_amount=round_money(total),
    )


def calculate_profit_margin(selling_price: Any, cost: Any) -> float:
    """Margin as a percentage of the selling price.

    Returns ``0`` when the cost is zero or missing, and when the selling
    price is zero.
    """
    cost_value = to_float(cost)
    price_value = to_float(selling_price)
    if cost_value == 0 or price_value == 0:
        return 0.0
    return ((price_value - cost_value) / price_value) * 100
