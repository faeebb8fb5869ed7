"""Event dispatcher — synchronous fan-out of session notifications.

Each SessionEvent has one replaceable observer slot (``on``) plus any
number of subscribers (``subscribe``). Emission runs on the caller's
execution context, slot observer first, then subscribers in registration
order. A failing observer is logged and skipped so it can never break the
answer stream that triggered it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from answer_client.state import SessionEvent

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

Observer = Callable[[Any], None]


class Subscription:
    """Handle returned by EventDispatcher.subscribe()."""

    def __init__(self, dispatcher: EventDispatcher, event: SessionEvent, observer: Observer):
        self._dispatcher = dispatcher
        self.event = event
        self.observer = observer
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop receiving notifications. Safe to call more than once."""
        if self._active:
            self._dispatcher._remove(self)
            self._active = False


class EventDispatcher:
    """Registry and synchronous invocation of session observers."""

    def __init__(self, observers: Mapping[SessionEvent, Observer] | None = None) -> None:
        self._slots: dict[SessionEvent, Observer] = {}
        self._subscriptions: dict[SessionEvent, list[Subscription]] = {
            event: [] for event in SessionEvent
        }
        for event, observer in (observers or {}).items():
            self.on(event, observer)

    def on(self, event: SessionEvent | str, observer: Observer) -> None:
        """Register the slot observer for an event, replacing any previous one."""
        self._slots[SessionEvent(event)] = observer

    def off(self, event: SessionEvent | str) -> None:
        """Clear the slot observer for an event."""
        self._slots.pop(SessionEvent(event), None)

    def subscribe(self, event: SessionEvent | str, observer: Observer) -> Subscription:
        """Add an observer alongside the slot observer."""
        subscription = Subscription(self, SessionEvent(event), observer)
        self._subscriptions[subscription.event].append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions[subscription.event]
        if subscription in subscriptions:
            subscriptions.remove(subscription)

    def has_observers(self, event: SessionEvent | str) -> bool:
        event = SessionEvent(event)
        return event in self._slots or bool(self._subscriptions[event])

    def emit(self, event: SessionEvent, payload: Any) -> None:
        """Invoke every observer of ``event`` with ``payload``."""
        observers: list[Observer] = []
        slot = self._slots.get(event)
        if slot is not None:
            observers.append(slot)
        # Copy so observers may unsubscribe while being notified
        observers.extend(s.observer for s in list(self._subscriptions[event]))

        for observer in observers:
            try:
                observer(payload)
            except Exception:
                logger.exception("Observer for '%s' raised", event)


__all__ = ["EventDispatcher", "Observer", "Subscription"]
