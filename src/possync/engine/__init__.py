"""Pure, stateless business computations.

Every function here is total: malformed numeric input degrades to zero and
validators report problems through result objects instead of raising.
"""

from possync.engine.formatting import format_currency, generate_order_number, generate_sku, sanitize_input
from possync.engine.inventory import calculate_table_utilization, count_stock_statuses, get_stock_status
from possync.engine.orders import calculate_order_totals, calculate_profit_margin, calculate_subtotal
from possync.engine.pagination import calculate_pagination
from possync.engine.periods import get_analytics_periods, validate_date_range
from possync.engine.responses import (
    format_error_response,
    format_response,
    format_success_response,
    validation_response,
)
from possync.engine.validation import (
    is_valid_percentage,
    is_valid_price,
    validate_inventory,
    validate_order,
    validate_product,
    validate_table,
    validate_user,
)

__all__ = [
    "calculate_order_totals",
    "calculate_pagination",
    "calculate_profit_margin",
    "calculate_subtotal",
    "calculate_table_utilization",
    "count_stock_statuses",
    "format_currency",
    "format_error_response",
    "format_response",
    "format_success_response",
    "generate_order_number",
    "generate_sku",
    "get_analytics_periods",
    "get_stock_status",
    "is_valid_percentage",
    "is_valid_price",
    "sanitize_input",
    "validate_date_range",
    "validate_inventory",
    "validate_order",
    "validate_product",
    "validate_table",
    "validate_user",
    "validation_response",
]
