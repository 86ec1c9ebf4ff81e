"""Aggregate models held by the state store.

Base fields are plain model fields. Derived fields are ``computed_field``
properties: they are recomputed from the base fields on every access and are
never accepted as input, so they cannot drift from the values they summarize.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import Field, computed_field

from possync._constants import TOP_EXPENSE_CATEGORIES
from possync._normalize import ZERO, round_money
from possync.models._base import Money, PosBaseModel, Quantity

_HUNDRED = Decimal(100)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return round_money(ZERO)
    return round_money(part / whole * _HUNDRED)


def _average(total: Decimal, count: int) -> Decimal:
    if count == 0:
        return round_money(ZERO)
    return round_money(total / count)


class AggregateName(StrEnum):
    STOCK = "stock"
    EXPENSES = "expenses"
    DASHBOARD = "dashboard"


# ----------------------------------------------------------------------
# Stock
# ----------------------------------------------------------------------


class CategoryValue(PosBaseModel):
    name: str
    value: Money = Decimal("0.00")
    items: Quantity = 0


class CategoryShare(CategoryValue):
    percentage: Decimal


class StockSummary(PosBaseModel):
    total_products: Quantity = 0
    low_stock_items: Quantity = 0
    out_of_stock_items: Quantity = 0
    total_stock_value: Money = Decimal("0.00")
    categories: list[CategoryValue] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def in_stock_items(self) -> int:
        return max(self.total_products - self.low_stock_items - self.out_of_stock_items, 0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_item_value(self) -> Decimal:
        return _average(self.total_stock_value, self.total_products)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def category_breakdown(self) -> list[CategoryShare]:
        whole = sum((category.value for category in self.categories), ZERO)
        return [
            CategoryShare(
                name=category.name,
                value=category.value,
                items=category.items,
                percentage=_percentage(category.value, whole),
            )
            for category in self.categories
        ]


# ----------------------------------------------------------------------
# Expenses
# ----------------------------------------------------------------------


class MonthlyAmount(PosBaseModel):
    month: str
    amount: Money = Decimal("0.00")


class ExpenseCategory(PosBaseModel):
    name: str
    amount: Money = Decimal("0.00")


class ExpenseShare(ExpenseCategory):
    percentage: Decimal


class ExpenseSummary(PosBaseModel):
    total_expenses: Money = Decimal("0.00")
    monthly_expenses: Money = Decimal("0.00")
    pending_payments: Money = Decimal("0.00")
    monthly_trends: list[MonthlyAmount] = Field(default_factory=list)
    categories: list[ExpenseCategory] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_monthly_expense(self) -> Decimal:
        total = sum((trend.amount for trend in self.monthly_trends), ZERO)
        return _average(total, len(self.monthly_trends))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def expense_categories(self) -> list[ExpenseShare]:
        whole = sum((category.amount for category in self.categories), ZERO)
        return [
            ExpenseShare(
                name=category.name,
                amount=category.amount,
                percentage=_percentage(category.amount, whole),
            )
            for category in self.categories
        ]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def top_expense_categories(self) -> list[ExpenseShare]:
        # sorted() is stable: equal amounts keep their input order.
        ranked = sorted(self.expense_categories, key=lambda share: share.amount, reverse=True)
        return ranked[:TOP_EXPENSE_CATEGORIES]


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------


class DashboardMetrics(PosBaseModel):
    total_revenue: Money = Decimal("0.00")
    total_orders: Quantity = 0
    completed_orders: Quantity = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_order_value(self) -> Decimal:
        return _average(self.total_revenue, self.total_orders)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completion_rate(self) -> Decimal:
        return _percentage(Decimal(self.completed_orders), Decimal(self.total_orders))


Aggregate = StockSummary | ExpenseSummary | DashboardMetrics

AGGREGATE_TYPES: dict[AggregateName, type[StockSummary] | type[ExpenseSummary] | type[DashboardMetrics]] = {
    AggregateName.STOCK: StockSummary,
    AggregateName.EXPENSES: ExpenseSummary,
    AggregateName.DASHBOARD: DashboardMetrics,
}
