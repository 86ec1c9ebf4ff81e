"""Order line, discount and totals models."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import Field

from possync.models._base import Amount, Money, PosBaseModel, Quantity


class DiscountType(StrEnum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class OrderLine(PosBaseModel):
    """One line of an order. Only quantity and unit price are computed on."""

    quantity: Quantity = 0
    unit_price: Amount = Field(default=Decimal("0"), ge=0)
    name: str | None = None
    product_id: int | str | None = None


class Discount(PosBaseModel):
    type: DiscountType = DiscountType.FIXED
    amount: Amount = Decimal("0")


class OrderTotals(PosBaseModel):
    """Rounded order totals.

    Invariants: ``0 <= discount_amount <= subtotal`` and ``total_amount >= 0``.
    """

    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    total_amount: Money


class OrderInput(PosBaseModel):
    """Order input as supplied by callers at the API boundary."""

    items: list[OrderLine] = Field(default_factory=list)
    tax_rate: Amount = Decimal("0")
    discount: Discount = Field(default_factory=Discount)

    def totals(self) -> OrderTotals:
        from possync.engine.orders import calculate_order_totals

        return calculate_order_totals(
            self.items,
            tax_rate=self.tax_rate,
            discount_amount=self.discount.amount,
            discount_type=self.discount.type,
        )
