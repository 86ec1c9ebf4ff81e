"""Stock classification and table utilization."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from possync._normalize import to_float
from possync.models.inventory import StockRecord, StockStatus


def get_stock_status(current_stock: Any, minimum_stock: Any, reorder_point: Any) -> StockStatus:
    """Classify a stock level.

    Checks run in a fixed order: out of stock, reorder needed, low stock.
    With ``reorder_point > minimum_stock`` a level above the minimum can still
    report ``reorder_needed``.
    """
    current = to_float(current_stock)
    if current <= 0:
        return StockStatus.OUT_OF_STOCK
    if current <= to_float(reorder_point):
        return StockStatus.REORDER_NEEDED
    if current <= to_float(minimum_stock):
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def count_stock_statuses(records: Iterable[StockRecord]) -> dict[StockStatus, int]:
    """Tally records per status; every status is present in the result."""
    counts = dict.fromkeys(StockStatus, 0)
    for record in records:
        counts[get_stock_status(record.current_stock, record.minimum_stock, record.reorder_point)] += 1
    return counts


def calculate_table_utilization(total_tables: Any, occupied_tables: Any) -> float:
    total = to_float(total_tables)
    if total == 0:
        return 0.0
    return (to_float(occupied_tables) / total) * 100
