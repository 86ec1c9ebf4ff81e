"""possync - Realtime sync client and computation engine for POS back offices."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("possync")
except PackageNotFoundError:
    __version__ = "0+local"
from possync.client import PosSyncClient
from possync.config import SyncConfig
from possync.exceptions import EnvelopeError, PosSyncConfigError, PosSyncError, PosSyncTransportError
from possync.models import (
    AnalyticsPeriod,
    AnalyticsPeriods,
    ApiResponse,
    DateRangeError,
    DateRangeValidation,
    DiscountType,
    Envelope,
    LifecycleTopic,
    MessageType,
    OrderInput,
    OrderLine,
    OrderTotals,
    Pagination,
    StockRecord,
    StockStatus,
    ValidationResult,
)
from possync.state import AggregateName, DashboardMetrics, ExpenseSummary, StateStore, StockSummary
from possync.sync import ConnectionManager, ConnectionState, ConnectionStatus, EventRouter, Subscription

__all__ = [
    "__version__",
    "AggregateName",
    "AnalyticsPeriod",
    "AnalyticsPeriods",
    "ApiResponse",
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    "DashboardMetrics",
    "DateRangeError",
    "DateRangeValidation",
    "DiscountType",
    "Envelope",
    "EnvelopeError",
    "EventRouter",
    "ExpenseSummary",
    "LifecycleTopic",
    "MessageType",
    "OrderInput",
    "OrderLine",
    "OrderTotals",
    "Pagination",
    "PosSyncClient",
    "PosSyncConfigError",
    "PosSyncError",
    "PosSyncTransportError",
    "StateStore",
    "StockRecord",
    "StockStatus",
    "StockSummary",
    "Subscription",
    "SyncConfig",
    "ValidationResult",
]
