from __future__ import annotations

import pytest

from possync.engine.inventory import calculate_table_utilization, count_stock_statuses, get_stock_status
from possync.models.inventory import StockRecord, StockStatus


@pytest.mark.parametrize(
    ("current", "minimum", "reorder", "expected"),
    [
        (0, 10, 5, StockStatus.OUT_OF_STOCK),
        (5, 10, 5, StockStatus.REORDER_NEEDED),
        (8, 10, 5, StockStatus.LOW_STOCK),
        (20, 10, 5, StockStatus.IN_STOCK),
        (-2, 10, 5, StockStatus.OUT_OF_STOCK),
        ("abc", 10, 5, StockStatus.OUT_OF_STOCK),
        ("7", "10", "5", StockStatus.LOW_STOCK),
    ],
)
def test_get_stock_status(current: object, minimum: object, reorder: object, expected: StockStatus) -> None:
    assert get_stock_status(current, minimum, reorder) == expected


def test_reorder_check_runs_before_low_stock() -> None:
    # Reorder point above the minimum: a level above the minimum still reports reorder_needed.
    assert get_stock_status(12, 10, 15) == StockStatus.REORDER_NEEDED


def test_non_positive_stock_is_always_out_of_stock() -> None:
    for current in (-5, 0):
        for minimum in (0, 3, 10):
            for reorder in (0, 2, 20):
                assert get_stock_status(current, minimum, reorder) == StockStatus.OUT_OF_STOCK


def test_stock_record_status_and_aliases() -> None:
    record = StockRecord.model_validate({"currentStock": "4", "minimumStock": 10, "reorderPoint": 5, "productId": 9})

    assert record.current_stock == 4
    assert record.product_id == 9
    assert record.status == StockStatus.REORDER_NEEDED


def test_count_stock_statuses_reports_every_status() -> None:
    records = [
        StockRecord(current_stock=0, minimum_stock=10, reorder_point=5),
        StockRecord(current_stock=0, minimum_stock=10, reorder_point=5),
        StockRecord(current_stock=50, minimum_stock=10, reorder_point=5),
    ]

    assert count_stock_statuses(records) == {
        StockStatus.OUT_OF_STOCK: 2,
        StockStatus.REORDER_NEEDED: 0,
        StockStatus.LOW_STOCK: 0,
        StockStatus.IN_STOCK: 1,
    }


@pytest.mark.parametrize(
    ("total", "occupied", "expected"),
    [(20, 5, 25.0), (0, 0, 0.0), (0, 3, 0.0), ("x", 3, 0.0), ("8", "8", 100.0)],
)
def test_table_utilization(total: object, occupied: object, expected: float) -> None:
    assert calculate_table_utilization(total, occupied) == pytest.approx(expected)
