#!/usr/bin/env python3
"""One-shot timer service backing the heartbeat watchdog."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerService(Protocol):
    def schedule(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingTimerHandle:
    """Handle for a scheduled one-shot; cancel() is safe before or after firing."""

    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()

    @property
    def active(self) -> bool:
        return self._timer.is_alive()


class ThreadingTimerService:
    """
    Schedule callbacks on daemon ``threading.Timer`` threads.

    The callback runs on the timer thread, so callers that own state should
    only hand work over (e.g. put onto a queue) from it.
    """

    def __init__(self, thread_name: str = "HeartbeatWatchdog") -> None:
        self._thread_name = thread_name

    def schedule(self, delay_s: float, callback: Callable[[], None]) -> ThreadingTimerHandle:
        def fire():
            try:
                callback()
            except Exception as e:
                logging.exception("Timer callback error: %s", e)

        timer = threading.Timer(delay_s, fire)
        timer.name = self._thread_name
        timer.daemon = True
        timer.start()
        logging.debug("Timer scheduled: %.1f s", delay_s)
        return ThreadingTimerHandle(timer)
