"""State/store layer.

The single place where server pushes and engine results are merged into the
application's aggregates (stock, expenses, dashboard metrics).
"""

from possync.state.aggregates import AggregateName, DashboardMetrics, ExpenseSummary, StockSummary
from possync.state.bindings import bind_store
from possync.state.store import StateStore

__all__ = [
    "AggregateName",
    "DashboardMetrics",
    "ExpenseSummary",
    "StateStore",
    "StockSummary",
    "bind_store",
]
