"""In-memory store for the application's business aggregates.

This is the only component allowed to mutate aggregates. Every mutation is a
merge of base fields followed by re-validation, which recomputes the derived
fields; whole aggregates are never replaced from outside.
"""

from __future__ import annotations

import copy
import logging
from collections import OrderedDict
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel

from possync._constants import COMPLETED_ORDER_HISTORY
from possync._normalize import to_decimal
from possync.engine.inventory import count_stock_statuses
from possync.models.inventory import StockRecord, StockStatus
from possync.models.order import OrderInput
from possync.state.aggregates import (
    AGGREGATE_TYPES,
    Aggregate,
    AggregateName,
    DashboardMetrics,
    ExpenseSummary,
    StockSummary,
)

_logger = logging.getLogger(__name__)

Listener = Callable[[AggregateName, BaseModel], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _field_lookup(model_cls: type[BaseModel]) -> dict[str, str]:
    """Map both field names and their camelCase aliases to field names."""
    lookup: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        lookup[name] = name
        if info.alias:
            lookup[info.alias] = name
    return lookup


_FIELD_LOOKUPS: dict[AggregateName, dict[str, str]] = {
    name: _field_lookup(model_cls) for name, model_cls in AGGREGATE_TYPES.items()
}


class StateStore:
    """Canonical mirror of stock, expense and dashboard aggregates.

    Single writer: the owning event loop. Within it the last :meth:`update`
    for a field wins.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        completed_order_history: int = COMPLETED_ORDER_HISTORY,
    ) -> None:
        self._clock = clock
        self._completed_order_history = completed_order_history
        self._aggregates: dict[AggregateName, Aggregate] = {
            name: model_cls() for name, model_cls in AGGREGATE_TYPES.items()
        }
        self._updated_at: dict[AggregateName, datetime | None] = dict.fromkeys(AGGREGATE_TYPES)
        self._listeners: list[Listener] = []
        # Most recently recorded completed-order ids, oldest first.
        self._completed_order_ids: OrderedDict[str, None] = OrderedDict()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, name: AggregateName | str) -> Aggregate:
        # Aggregates are frozen models, safe to hand out directly.
        return self._aggregates[AggregateName(name)]

    @property
    def stock(self) -> StockSummary:
        return self._aggregates[AggregateName.STOCK]  # type: ignore[return-value]

    @property
    def expenses(self) -> ExpenseSummary:
        return self._aggregates[AggregateName.EXPENSES]  # type: ignore[return-value]

    @property
    def dashboard(self) -> DashboardMetrics:
        return self._aggregates[AggregateName.DASHBOARD]  # type: ignore[return-value]

    def updated_at(self, name: AggregateName | str) -> datetime | None:
        return self._updated_at[AggregateName(name)]

    def snapshot(self) -> dict[AggregateName, dict[str, Any]]:
        """Dump every aggregate, derived fields included."""
        return {name: aggregate.model_dump() for name, aggregate in self._aggregates.items()}

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call *listener(name, aggregate)* after every update. Returns a remover."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self, name: AggregateName, aggregate: Aggregate) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(name, aggregate)
            except Exception:
                _logger.exception("State listener raised for aggregate=%s", name)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update(self, name: AggregateName | str, partial: Mapping[str, Any]) -> Aggregate:
        """Merge the base fields present in *partial* and recompute derived fields.

        Keys may be snake_case field names or camelCase aliases. ``None``
        values mean "no update". Derived and unknown keys are ignored. On a
        validation error the aggregate is left untouched and
        :class:`pydantic.ValidationError` propagates.
        """
        key = AggregateName(name)
        lookup = _FIELD_LOOKUPS[key]
        current = self._aggregates[key]

        patch: dict[str, Any] = {}
        ignored: list[str] = []
        for raw_key, value in partial.items():
            field_name = lookup.get(raw_key)
            if field_name is None:
                ignored.append(raw_key)
                continue
            if value is None:
                continue
            patch[field_name] = copy.deepcopy(value)
        if ignored:
            _logger.debug("Ignoring non-base keys for %s: %s", key, sorted(ignored))

        model_cls = type(current)
        merged = current.model_dump(include=set(model_cls.model_fields))
        merged.update(patch)
        updated = model_cls.model_validate(merged)

        self._aggregates[key] = updated
        self._updated_at[key] = self._clock()
        _logger.debug("Updated %s fields=%s", key, sorted(patch))
        self._notify(key, updated)
        return updated

    def update_stock(self, partial: Mapping[str, Any]) -> StockSummary:
        return self.update(AggregateName.STOCK, partial)  # type: ignore[return-value]

    def update_expenses(self, partial: Mapping[str, Any]) -> ExpenseSummary:
        return self.update(AggregateName.EXPENSES, partial)  # type: ignore[return-value]

    def update_dashboard(self, partial: Mapping[str, Any]) -> DashboardMetrics:
        return self.update(AggregateName.DASHBOARD, partial)  # type: ignore[return-value]

    def classify_stock(self, records: Iterable[StockRecord | Mapping[str, Any]]) -> StockSummary:
        """Recount product and low/out-of-stock totals from per-product records.

        ``reorder_needed`` products count as low stock.
        """
        parsed = [
            record if isinstance(record, StockRecord) else StockRecord.model_validate(record)
            for record in records
        ]
        counts = count_stock_statuses(parsed)
        return self.update_stock(
            {
                "total_products": len(parsed),
                "low_stock_items": counts[StockStatus.LOW_STOCK] + counts[StockStatus.REORDER_NEEDED],
                "out_of_stock_items": counts[StockStatus.OUT_OF_STOCK],
            }
        )

    def record_completed_order(self, payload: Mapping[str, Any]) -> DashboardMetrics:
        """Fold one completed order into the dashboard metrics.

        Revenue comes from ``total_amount``/``total``; without either it is
        computed from ``items``, ``tax_rate`` and ``discount``. An order id
        seen before is not counted twice; an id is only remembered once its
        order has been folded in, so a rejected payload can be re-delivered.
        """
        order_id = payload.get("id")
        order_key = str(order_id) if order_id is not None else None
        if order_key is not None and order_key in self._completed_order_ids:
            _logger.debug("Completed order id=%s already recorded", order_key)
            return self.dashboard

        total = payload.get("total_amount", payload.get("totalAmount", payload.get("total")))
        if total is None and payload.get("items"):
            order_data = {key: payload[key] for key in ("items", "tax_rate", "taxRate", "discount") if key in payload}
            discount = order_data.get("discount")
            if discount is not None and not isinstance(discount, Mapping):
                # POS screens send a bare fixed amount.
                order_data["discount"] = {"type": "fixed", "amount": discount}
            amount = OrderInput.model_validate(order_data).totals().total_amount
        else:
            amount = to_decimal(total)

        current = self.dashboard
        updated = self.update_dashboard(
            {
                "total_revenue": current.total_revenue + amount,
                "total_orders": current.total_orders + 1,
                "completed_orders": current.completed_orders + 1,
            }
        )
        if order_key is not None:
            self._remember_completed_order(order_key)
        return updated

    def _remember_completed_order(self, order_key: str) -> None:
        self._completed_order_ids[order_key] = None
        while len(self._completed_order_ids) > self._completed_order_history:
            self._completed_order_ids.popitem(last=False)
