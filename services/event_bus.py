#!/usr/bin/env python3
"""In-process publish/subscribe bus for link state notifications."""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable, Dict, List, Type

Subscriber = Callable[[Any], None]


class EventBus:
    """
    Broadcast events to subscribers registered by event class.

    Delivery is synchronous on the publisher's thread. A subscriber raising is
    logged and skipped; the remaining subscribers still receive the event.
    """

    def __init__(self, name: str = "EventBus") -> None:
        self._logger = logging.getLogger(name)
        self._by_type: Dict[Type[Any], List[Subscriber]] = {}
        self._catch_all: List[Subscriber] = []
        self._lock = RLock()

    def subscribe(self, event_type: Type[Any], callback: Subscriber) -> None:
        """Deliver events that are instances of ``event_type`` to ``callback``."""
        with self._lock:
            self._by_type.setdefault(event_type, []).append(callback)

    def subscribe_all(self, callback: Subscriber) -> None:
        """Deliver every published event to ``callback``."""
        with self._lock:
            self._catch_all.append(callback)

    def unsubscribe(self, event_type: Type[Any], callback: Subscriber) -> bool:
        """Remove a subscription; returns False if it was not registered."""
        with self._lock:
            callbacks = self._by_type.get(event_type, [])
            if callback not in callbacks:
                return False
            callbacks.remove(callback)
            if not callbacks:
                del self._by_type[event_type]
            return True

    def publish(self, event: Any) -> int:
        """
        Publish ``event`` to all matching subscribers.

        Args:
            event: Any event object; matched against subscriptions with isinstance()

        Returns:
            Number of subscribers that were called
        """
        with self._lock:
            targets: List[Subscriber] = []
            for event_type, callbacks in self._by_type.items():
                if isinstance(event, event_type):
                    targets.extend(callbacks)
            targets.extend(self._catch_all)

        self._logger.debug("Publishing %s to %d subscriber(s)", event, len(targets))
        for callback in targets:
            try:
                callback(event)
            except Exception as e:
                self._logger.exception("Subscriber %r failed on %s: %s", callback, event, e)
        return len(targets)
