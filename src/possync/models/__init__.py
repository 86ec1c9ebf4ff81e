"""Value objects for the sync core and computation engine."""

from possync.models._base import Amount, Instant, Money, PosBaseModel, Quantity, parse_instant
from possync.models.analytics import AnalyticsPeriod, AnalyticsPeriods
from possync.models.envelope import Envelope, LifecycleTopic, MessageType, parse_envelope
from possync.models.inventory import StockRecord, StockStatus
from possync.models.order import Discount, DiscountType, OrderInput, OrderLine, OrderTotals
from possync.models.pagination import Pagination
from possync.models.responses import ApiResponse
from possync.models.validation import DateRangeError, DateRangeValidation, ValidationResult

__all__ = [
    "Amount",
    "AnalyticsPeriod",
    "AnalyticsPeriods",
    "ApiResponse",
    "DateRangeError",
    "DateRangeValidation",
    "Discount",
    "DiscountType",
    "Envelope",
    "Instant",
    "LifecycleTopic",
    "MessageType",
    "Money",
    "OrderInput",
    "OrderLine",
    "OrderTotals",
    "Pagination",
    "PosBaseModel",
    "Quantity",
    "StockRecord",
    "StockStatus",
    "ValidationResult",
    "parse_envelope",
    "parse_instant",
]
