#!/usr/bin/env python3
"""Link-loss failsafe latch for the heartbeat relay."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from services.event_bus import EventBus
from services.heartbeat_events import HeartbeatLost
from services.heartbeat_monitor import HeartbeatMonitor

# Global failsafe trigger (thread-safe)
_failsafe_triggered = threading.Event()
_failsafe_reason = threading.Lock()
_failsafe_reason_text = ""


def trigger_failsafe(reason: str) -> None:
    """
    Thread-safe function to latch the failsafe from any thread.

    Only the first reason is kept until reset_failsafe() is called.

    Args:
        reason: Human-readable reason for the failsafe
    """
    global _failsafe_reason_text
    with _failsafe_reason:
        if not _failsafe_triggered.is_set():
            _failsafe_reason_text = reason
            _failsafe_triggered.set()
            logging.critical("🚨 FAILSAFE TRIGGERED: %s", reason)


def is_failsafe_triggered() -> bool:
    """Check if the failsafe has been triggered."""
    return _failsafe_triggered.is_set()


def get_failsafe_reason() -> str:
    """Get the reason for the failsafe trigger."""
    with _failsafe_reason:
        return _failsafe_reason_text


def wait_for_failsafe(timeout: float | None = None) -> bool:
    """Block until the failsafe triggers; returns False on timeout."""
    return _failsafe_triggered.wait(timeout)


def reset_failsafe() -> None:
    """Clear the latch (new session or tests)."""
    global _failsafe_reason_text
    with _failsafe_reason:
        _failsafe_reason_text = ""
        _failsafe_triggered.clear()


def attach_link_failsafe(bus: EventBus, monitor: HeartbeatMonitor) -> Callable[[HeartbeatLost], None]:
    """
    Latch the failsafe when a vehicle that has been armed this session goes silent.

    A vehicle that was never armed (e.g. on the bench) only produces a warning.

    Returns:
        The bus subscriber, so callers can unsubscribe it
    """

    def on_lost(event: HeartbeatLost) -> None:
        if monitor.has_been_armed:
            trigger_failsafe(f"Heartbeat lost from armed vehicle sysId {event.sys_id}")
        else:
            logging.warning("Heartbeat lost from sysId %d (never armed, no failsafe)", event.sys_id)

    bus.subscribe(HeartbeatLost, on_lost)
    return on_lost
