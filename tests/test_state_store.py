from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest
from pydantic import BaseModel, ValidationError

from possync.models.envelope import Envelope
from possync.models.inventory import StockRecord
from possync.state.aggregates import AggregateName
from possync.state.bindings import bind_store
from possync.state.store import StateStore
from possync.sync.router import EventRouter


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_initial_aggregates_are_zero() -> None:
    store = StateStore(clock=_dt)

    assert store.dashboard.total_orders == 0
    assert store.dashboard.average_order_value == Decimal("0.00")
    assert store.stock.in_stock_items == 0
    assert store.expenses.top_expense_categories == []
    assert store.updated_at(AggregateName.DASHBOARD) is None


def test_partial_update_merges_and_recomputes_derived_fields() -> None:
    store = StateStore(clock=_dt)

    store.update_dashboard({"total_revenue": "1000", "total_orders": 8, "completed_orders": 6})
    assert store.dashboard.average_order_value == Decimal("125.00")
    assert store.dashboard.completion_rate == Decimal("75.00")

    store.update_dashboard({"total_orders": 10})
    assert store.dashboard.total_revenue == Decimal("1000.00")
    assert store.dashboard.average_order_value == Decimal("100.00")
    assert store.dashboard.completion_rate == Decimal("60.00")
    assert store.updated_at("dashboard") == _dt()


def test_camel_case_keys_and_none_values() -> None:
    store = StateStore(clock=_dt)

    store.update_dashboard({"totalRevenue": 50, "totalOrders": 2})
    store.update_dashboard({"totalRevenue": None})

    assert store.dashboard.total_revenue == Decimal("50.00")
    assert store.dashboard.average_order_value == Decimal("25.00")


def test_derived_and_unknown_keys_are_ignored() -> None:
    store = StateStore(clock=_dt)
    store.update_dashboard({"total_revenue": 90, "total_orders": 3})

    store.update_dashboard({"average_order_value": 999, "averageOrderValue": 999, "bogus": 1})

    assert store.dashboard.average_order_value == Decimal("30.00")


def test_identical_update_is_idempotent() -> None:
    store = StateStore(clock=_dt)
    partial = {"total_stock_value": "1500.25", "total_products": 4, "low_stock_items": 1}

    first = store.update_stock(partial)
    second = store.update_stock(partial)

    assert first == second


def test_invalid_update_leaves_aggregate_untouched() -> None:
    store = StateStore(clock=_dt)
    store.update_stock({"total_products": 3})

    with pytest.raises(ValidationError):
        store.update_stock({"categories": "nope"})

    assert store.stock.total_products == 3


def test_stock_breakdown() -> None:
    store = StateStore(clock=_dt)
    store.update_stock(
        {
            "totalProducts": 15,
            "lowStockItems": 2,
            "outOfStockItems": 1,
            "totalStockValue": 400,
            "categories": [
                {"name": "Beverages", "value": "300", "items": 10},
                {"name": "Food", "value": 100, "items": 5},
            ],
        }
    )

    stock = store.stock
    assert stock.in_stock_items == 12
    assert stock.average_item_value == Decimal("26.67")
    assert [(share.name, share.percentage) for share in stock.category_breakdown] == [
        ("Beverages", Decimal("75.00")),
        ("Food", Decimal("25.00")),
    ]


def test_expense_trends_and_top_categories() -> None:
    store = StateStore(clock=_dt)
    store.update_expenses(
        {
            "monthlyTrends": [{"month": "Jul", "amount": 8500}, {"month": "Aug", "amount": 9200}],
            "categories": [
                {"name": "a", "amount": 10},
                {"name": "b", "amount": 60},
                {"name": "c", "amount": 30},
                {"name": "d", "amount": 30},
                {"name": "e", "amount": 5},
                {"name": "f", "amount": 40},
            ],
        }
    )

    expenses = store.expenses
    assert expenses.average_monthly_expense == Decimal("8850.00")
    assert [share.name for share in expenses.top_expense_categories] == ["b", "f", "c", "d", "a"]
    assert expenses.expense_categories[1].percentage == Decimal("34.29")


def test_snapshot_includes_derived_fields() -> None:
    store = StateStore(clock=_dt)
    store.update_dashboard({"total_revenue": 10, "total_orders": 4})

    snapshot = store.snapshot()

    assert snapshot[AggregateName.DASHBOARD]["average_order_value"] == Decimal("2.50")
    assert "in_stock_items" in snapshot[AggregateName.STOCK]


def test_classify_stock_counts_reorder_as_low() -> None:
    store = StateStore(clock=_dt)

    store.classify_stock(
        [
            StockRecord(current_stock=0, minimum_stock=10, reorder_point=5),
            {"currentStock": 5, "minimumStock": 10, "reorderPoint": 5},
            {"current_stock": 8, "minimum_stock": 10, "reorder_point": 5},
            {"current_stock": 40, "minimum_stock": 10, "reorder_point": 5},
        ]
    )

    assert store.stock.total_products == 4
    assert store.stock.low_stock_items == 2
    assert store.stock.out_of_stock_items == 1
    assert store.stock.in_stock_items == 1


class TestCompletedOrders:
    def test_uses_reported_total(self) -> None:
        store = StateStore(clock=_dt)

        store.record_completed_order({"id": 1, "totalAmount": "20.35"})

        assert store.dashboard.total_revenue == Decimal("20.35")
        assert store.dashboard.total_orders == 1
        assert store.dashboard.completed_orders == 1

    def test_duplicate_id_is_counted_once(self) -> None:
        store = StateStore(clock=_dt)

        store.record_completed_order({"id": 1, "total": 10})
        store.record_completed_order({"id": "1", "total": 10})

        assert store.dashboard.total_orders == 1
        assert store.dashboard.total_revenue == Decimal("10.00")

    def test_computes_total_from_items(self) -> None:
        store = StateStore(clock=_dt)

        store.record_completed_order(
            {
                "id": 2,
                "items": [{"quantity": 2, "unitPrice": "5.00"}, {"quantity": 1, "unit_price": 8.5}],
                "taxRate": 10,
            }
        )

        assert store.dashboard.total_revenue == Decimal("20.35")

    def test_bare_discount_is_a_fixed_amount(self) -> None:
        store = StateStore(clock=_dt)

        store.record_completed_order(
            {
                "items": [{"quantity": 2, "unitPrice": "5.00"}, {"quantity": 1, "unitPrice": "8.50"}],
                "tax_rate": 10,
                "discount": 1.85,
            }
        )

        assert store.dashboard.total_revenue == Decimal("18.32")

    def test_rejected_order_can_be_redelivered(self) -> None:
        store = StateStore(clock=_dt)

        with pytest.raises(ValidationError):
            store.record_completed_order({"id": 9, "items": [{"quantity": 1, "unitPrice": -5}]})
        store.record_completed_order({"id": 9, "items": [{"quantity": 1, "unitPrice": 5}]})

        assert store.dashboard.total_orders == 1
        assert store.dashboard.total_revenue == Decimal("5.00")

    def test_remembered_ids_are_bounded(self) -> None:
        store = StateStore(clock=_dt, completed_order_history=2)

        for order_id in (1, 2, 3):
            store.record_completed_order({"id": order_id, "total": 1})
        store.record_completed_order({"id": 3, "total": 1})
        # The oldest id has been forgotten and counts again.
        store.record_completed_order({"id": 1, "total": 1})

        assert store.dashboard.total_orders == 4


def test_listeners_are_notified_and_isolated() -> None:
    store = StateStore(clock=_dt)
    seen: list[tuple[AggregateName, BaseModel]] = []

    def _broken(_name: AggregateName, _aggregate: BaseModel) -> None:
        raise RuntimeError("listener failed")

    store.add_listener(_broken)
    remove = store.add_listener(lambda name, aggregate: seen.append((name, aggregate)))

    store.update_dashboard({"total_orders": 1})
    remove()
    store.update_dashboard({"total_orders": 2})

    assert len(seen) == 1
    assert seen[0][0] == AggregateName.DASHBOARD


class TestBindings:
    def _bound(self) -> tuple[EventRouter, StateStore]:
        router = EventRouter()
        store = StateStore(clock=_dt)
        bind_store(router, store)
        return router, store

    def _dispatch(self, router: EventRouter, type: str, payload: dict[str, Any]) -> None:
        router.dispatch(Envelope(type=type, payload=payload))

    def test_sales_metrics_update_dashboard(self) -> None:
        router, store = self._bound()
        self._dispatch(router, "sales:metrics", {"totalRevenue": 300, "totalOrders": 3})
        assert store.dashboard.average_order_value == Decimal("100.00")

    def test_dashboard_update_carries_nested_aggregates(self) -> None:
        router, store = self._bound()
        self._dispatch(
            router,
            "dashboard:update",
            {
                "totalOrders": 5,
                "expenseData": {"totalExpenses": 1200, "pendingPayments": 200},
                "stockData": {"totalProducts": 7, "outOfStockItems": 2},
            },
        )
        assert store.dashboard.total_orders == 5
        assert store.expenses.total_expenses == Decimal("1200.00")
        assert store.stock.in_stock_items == 5

    def test_inventory_records_are_classified(self) -> None:
        router, store = self._bound()
        self._dispatch(
            router,
            "inventory:update",
            {
                "records": [
                    {"currentStock": 0, "minimumStock": 5, "reorderPoint": 2},
                    {"currentStock": 9, "minimumStock": 5, "reorderPoint": 2},
                ],
                "totalStockValue": 90,
            },
        )
        assert store.stock.total_products == 2
        assert store.stock.out_of_stock_items == 1
        assert store.stock.total_stock_value == Decimal("90.00")

    def test_order_completed_folds_into_dashboard(self) -> None:
        router, store = self._bound()
        self._dispatch(router, "order:completed", {"id": 5, "totalAmount": 42})
        self._dispatch(router, "order:completed", {"id": 5, "totalAmount": 42})
        assert store.dashboard.total_revenue == Decimal("42.00")
        assert store.dashboard.completed_orders == 1
