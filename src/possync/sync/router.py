"""Typed publish/subscribe dispatch keyed by message type."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from possync.models.envelope import Envelope

_logger = logging.getLogger(__name__)

Callback = Callable[[dict[str, Any]], None]

_ids = itertools.count(1)


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`EventRouter.subscribe`.

    ``active`` flips to ``False`` on unsubscribe; a dispatch already iterating
    over a snapshot checks it before every call.
    """

    type: str
    callback: Callback
    router: EventRouter | None = field(default=None, repr=False)
    id: int = field(default_factory=lambda: next(_ids))
    active: bool = True

    def cancel(self) -> bool:
        if self.router is None:
            return False
        return self.router.unsubscribe(self)


class EventRouter:
    """Deliver envelopes to subscribers of their ``type``.

    Guarantees:

    - subscribers of one type run in registration order, once per dispatch
    - an exception in one callback is logged and does not stop the others
    - subscribe/unsubscribe during a dispatch is safe; a callback removed
      mid-dispatch is not called again, one added mid-dispatch waits for
      the next envelope
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscription]] = {}

    def subscribe(self, type: str, callback: Callback) -> Subscription:
        subscription = Subscription(type=str(type), callback=callback, router=self)
        self._subscribers.setdefault(subscription.type, []).append(subscription)
        _logger.debug("Subscribed id=%s type=%s", subscription.id, subscription.type)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove *subscription*. Returns ``False`` if it was not registered."""
        subscription.active = False
        current = self._subscribers.get(subscription.type)
        if not current or subscription not in current:
            return False
        # Rebind instead of mutating so in-flight snapshots stay intact.
        remaining = [sub for sub in current if sub is not subscription]
        if remaining:
            self._subscribers[subscription.type] = remaining
        else:
            self._subscribers.pop(subscription.type, None)
        _logger.debug("Unsubscribed id=%s type=%s", subscription.id, subscription.type)
        return True

    def subscriber_count(self, type: str) -> int:
        return len(self._subscribers.get(str(type), ()))

    def clear(self) -> None:
        for subscriptions in self._subscribers.values():
            for subscription in subscriptions:
                subscription.active = False
        self._subscribers.clear()

    def dispatch(self, envelope: Envelope) -> int:
        """Call every current subscriber of ``envelope.type`` with its payload.

        Returns the number of callbacks invoked, failed ones included.
        """
        snapshot = tuple(self._subscribers.get(envelope.type, ()))
        if not snapshot:
            _logger.debug("No subscribers for type=%s", envelope.type)
            return 0

        invoked = 0
        for subscription in snapshot:
            if not subscription.active:
                continue
            invoked += 1
            try:
                subscription.callback(envelope.payload)
            except Exception:
                _logger.exception(
                    "Subscriber id=%s for type=%s raised",
                    subscription.id,
                    envelope.type,
                )
        return invoked
