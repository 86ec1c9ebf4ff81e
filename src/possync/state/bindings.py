"""Wire the state store to router topics.

Translates server payloads into store updates:

- ``dashboard:update`` / ``sales:metrics``: dashboard base fields
- ``inventory:update``: stock summary fields, or per-product ``records`` that
  are reclassified through the computation engine
- ``order:completed``: folded into dashboard revenue and order counts
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from possync.models.envelope import MessageType
from possync.state.store import StateStore
from possync.sync.router import EventRouter, Subscription

_logger = logging.getLogger(__name__)


def _apply_dashboard(store: StateStore) -> Callable[[dict[str, Any]], None]:
    def _handler(payload: dict[str, Any]) -> None:
        store.update_dashboard(payload)
        expenses = payload.get("expenses") or payload.get("expenseData")
        if isinstance(expenses, dict):
            store.update_expenses(expenses)
        stock = payload.get("stock") or payload.get("stockData")
        if isinstance(stock, dict):
            store.update_stock(stock)

    return _handler


def _apply_inventory(store: StateStore) -> Callable[[dict[str, Any]], None]:
    def _handler(payload: dict[str, Any]) -> None:
        records = payload.get("records")
        if isinstance(records, list):
            store.classify_stock(records)
        summary = {key: value for key, value in payload.items() if key != "records"}
        if summary or not isinstance(records, list):
            store.update_stock(summary)

    return _handler


def _apply_order_completed(store: StateStore) -> Callable[[dict[str, Any]], None]:
    def _handler(payload: dict[str, Any]) -> None:
        store.record_completed_order(payload)

    return _handler


def bind_store(router: EventRouter, store: StateStore) -> list[Subscription]:
    """Subscribe *store* to the domain topics. Returns the subscriptions."""
    subscriptions = [
        router.subscribe(MessageType.DASHBOARD_UPDATE, _apply_dashboard(store)),
        router.subscribe(MessageType.SALES_METRICS, _apply_dashboard(store)),
        router.subscribe(MessageType.INVENTORY_UPDATE, _apply_inventory(store)),
        router.subscribe(MessageType.ORDER_COMPLETED, _apply_order_completed(store)),
    ]
    _logger.debug("State store bound to %d topics", len(subscriptions))
    return subscriptions
