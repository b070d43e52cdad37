#!/usr/bin/env python3
"""Heartbeat watchdog and vehicle state change detection."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from pymavlink import mavutil

from config import DEFAULT_HEARTBEAT_TIMEOUT_SEC
from services.event_bus import EventBus
from services.heartbeat_events import (
    ArmChanged,
    HeartbeatFound,
    HeartbeatLost,
    HeartbeatMessage,
    MonitorSnapshot,
    SystemStatusChanged,
)
from services.watchdog_timer import ThreadingTimerService, TimerHandle, TimerService
from utils.mavlink_names import mode_name, system_status_name

# Heartbeats from ground stations (including ourselves) never count as the vehicle
GCS_TYPE = mavutil.mavlink.MAV_TYPE_GCS
SAFETY_ARMED_FLAG = mavutil.mavlink.MAV_MODE_FLAG_SAFETY_ARMED

# Inbox item kinds
_HEARTBEAT = "heartbeat"
_WATCHDOG_EXPIRED = "watchdog_expired"
_FORCE_LOST = "force_lost"
_STOP = "stop"


def is_armed_mode(base_mode: Optional[int]) -> bool:
    """Return True if the MAV_MODE_FLAG_SAFETY_ARMED bit is set in ``base_mode``."""
    if base_mode is None:
        return False
    return (base_mode & SAFETY_ARMED_FLAG) != 0


@dataclass
class MonitorHooks:
    """
    Optional observer callbacks invoked by the monitor.

    Any slot left as None falls back to the monitor's log-only default. Hooks
    run on the monitor's processing thread after the corresponding event (if
    any) has been published.
    """

    on_mode_changed: Optional[Callable[[Optional[int], int], None]] = None
    on_armed_changed: Optional[Callable[[bool], None]] = None
    on_system_status_changed: Optional[Callable[[Optional[int]], None]] = None
    on_heartbeat_lost: Optional[Callable[[int], None]] = None
    on_heartbeat_found: Optional[Callable[[int], None]] = None


class HeartbeatMonitor:
    """
    Track liveness and armed/mode/status state of a single MAVLink peer.

    All inputs (heartbeats, watchdog expiry, forced loss, stop) go through one
    inbox and are handled one at a time, either by the worker thread started
    with start() or by process_pending() on the caller's thread.
    """

    def __init__(
        self,
        event_bus: EventBus,
        *,
        timer_service: Optional[TimerService] = None,
        timeout_seconds: float = DEFAULT_HEARTBEAT_TIMEOUT_SEC,
        hooks: Optional[MonitorHooks] = None,
        reset_baseline_on_reacquire: bool = False,
        logger_name: str = "HeartbeatMonitor",
    ) -> None:
        """
        Create a monitor in the no-contact state.

        Args:
            event_bus: Bus that receives HeartbeatFound/Lost, ArmChanged and SystemStatusChanged
            timer_service: One-shot scheduler for the watchdog (threading timers by default)
            timeout_seconds: Silence after which the peer is declared lost
            hooks: Observer callbacks replacing the default log-only behaviour
            reset_baseline_on_reacquire: If True, the first heartbeat after a loss is
                compared against empty state instead of the last-known values
            logger_name: Name of the logger used by this monitor
        """
        self._bus = event_bus
        self._timer_service = timer_service or ThreadingTimerService()
        self._timeout = timeout_seconds
        self._hooks = hooks or MonitorHooks()
        self._reset_baseline = reset_baseline_on_reacquire
        self._logger = logging.getLogger(logger_name)

        self._inbox: "queue.Queue[Tuple[str, Any]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_requested = False

        self._watchdog: Optional[TimerHandle] = None
        self._generation = 0

        self._sys_id: Optional[int] = None
        self.custom_mode: Optional[int] = None
        self.base_mode: Optional[int] = None
        self.system_status: Optional[int] = None
        self.vehicle_type: Optional[int] = None  # MAV_TYPE vehicle code
        self.autopilot_type: Optional[int] = None  # MAV_AUTOPILOT mfg code
        self._has_been_armed = False

    # ------------------------------------------------------------------
    # Read accessors

    @property
    def is_armed(self) -> bool:
        return is_armed_mode(self.base_mode)

    @property
    def has_heartbeat(self) -> bool:
        return self._sys_id is not None

    @property
    def heartbeat_sys_id(self) -> Optional[int]:
        return self._sys_id

    @property
    def has_been_armed(self) -> bool:
        """Has the vehicle been armed (ever) during this session."""
        return self._has_been_armed

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    def snapshot(self) -> MonitorSnapshot:
        return MonitorSnapshot(
            sys_id=self._sys_id,
            custom_mode=self.custom_mode,
            base_mode=self.base_mode,
            system_status=self.system_status,
            vehicle_type=self.vehicle_type,
            autopilot_type=self.autopilot_type,
            armed=self.is_armed,
            has_been_armed=self._has_been_armed,
        )

    # ------------------------------------------------------------------
    # Inputs (safe to call from any thread)

    def submit_heartbeat(self, msg: HeartbeatMessage) -> None:
        """Queue a decoded heartbeat for processing."""
        self._inbox.put((_HEARTBEAT, msg))

    def force_lost_heartbeat(self) -> None:
        """
        Declare that we don't have heartbeat anymore (e.g. the link was torn down).

        No-op if the monitor is not in contact when the command is processed.
        """
        self._inbox.put((_FORCE_LOST, None))

    # ------------------------------------------------------------------
    # Lifecycle

    def start(self) -> threading.Thread:
        """
        Start the background processing thread.

        Returns:
            The Thread object
        """
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        thr = threading.Thread(target=self._run, name="HBMonitor", daemon=True)
        self._thread = thr
        thr.start()
        self._logger.info("Heartbeat monitor thread started (timeout %.1f s).", self._timeout)
        return thr

    def stop(self, join_timeout: float = 1.0) -> None:
        """Cancel the watchdog and stop processing. Publishes nothing."""
        thr = self._thread
        if thr is None or not thr.is_alive():
            self._teardown()
            self._thread = None
            return
        # One stop request per worker; a second one would be left for the next worker
        if not self._stop_requested:
            self._stop_requested = True
            self._inbox.put((_STOP, None))
        thr.join(timeout=join_timeout)
        if thr.is_alive():
            # Worker still owns the inbox until it reaches the stop request
            self._logger.warning("Heartbeat monitor thread did not stop within %.1f s", join_timeout)
            return
        self._logger.info("Heartbeat monitor thread stopped.")
        self._thread = None

    def process_pending(self) -> int:
        """
        Handle every queued input on the calling thread.

        Returns:
            Number of inputs handled

        Raises:
            RuntimeError: If the worker thread is running
        """
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("process_pending() cannot run while the monitor thread is active")
        handled = 0
        while True:
            try:
                kind, payload = self._inbox.get_nowait()
            except queue.Empty:
                return handled
            handled += 1
            if kind == _STOP:
                self._teardown()
                return handled
            self._dispatch(kind, payload)

    def _run(self) -> None:
        while True:
            kind, payload = self._inbox.get()
            if kind == _STOP:
                self._teardown()
                self._stop_requested = False
                return
            self._dispatch(kind, payload)

    def _dispatch(self, kind: str, payload: Any) -> None:
        try:
            if kind == _HEARTBEAT:
                self._on_heartbeat(payload)
            elif kind == _WATCHDOG_EXPIRED:
                self._on_watchdog_expired(payload)
            elif kind == _FORCE_LOST:
                self._lose_heartbeat()
            else:
                self._logger.warning("Unknown monitor input %r ignored", kind)
        except Exception as e:
            self._logger.exception("Heartbeat monitor error: %s", e)

    def _teardown(self) -> None:
        self._cancel_watchdog()
        self._logger.debug("Heartbeat monitor torn down.")

    # ------------------------------------------------------------------
    # State machine

    def _on_heartbeat(self, msg: Any) -> None:
        if not isinstance(msg, HeartbeatMessage):
            self._logger.warning("Ignoring non-heartbeat input: %r", msg)
            return

        # We don't care about the heartbeats from a GCS
        if msg.type == GCS_TYPE:
            self._logger.debug("Ignoring GCS heartbeat from sysId %d", msg.sys_id)
            return

        if self._sys_id is None and self._reset_baseline:
            old_mode, old_base, old_armed, old_status, old_vehicle = None, None, False, None, None
        else:
            old_mode = self.custom_mode
            old_base = self.base_mode
            old_armed = self.is_armed
            old_status = self.system_status
            old_vehicle = self.vehicle_type

        self.custom_mode = msg.custom_mode
        self.base_mode = msg.base_mode
        self.autopilot_type = msg.autopilot
        self.system_status = msg.system_status
        self.vehicle_type = msg.type

        if self._sys_id is None:
            self._sys_id = msg.sys_id
            self._call_hook("on_heartbeat_found", self._log_heartbeat_found, msg.sys_id)
            self._bus.publish(HeartbeatFound(msg.sys_id))

        self._reset_watchdog()

        if old_mode != self.custom_mode or old_vehicle != self.vehicle_type or old_base != self.base_mode:
            self._call_hook("on_mode_changed", self._log_mode_changed, old_mode, self.custom_mode)

        armed = self.is_armed
        if old_armed != armed:
            if armed:
                self._has_been_armed = True
            self._bus.publish(ArmChanged(armed))
            self._call_hook("on_armed_changed", self._log_armed_changed, armed)

        if old_status != self.system_status:
            self._publish_status()

    def _on_watchdog_expired(self, generation: int) -> None:
        if generation != self._generation or self._sys_id is None:
            self._logger.debug("Ignoring stale watchdog expiry (generation %s)", generation)
            return
        self._logger.warning(
            "No heartbeat from sysId %d for %.1f s", self._sys_id, self._timeout
        )
        self._lose_heartbeat()

    def _lose_heartbeat(self) -> None:
        self._cancel_watchdog()
        if self._sys_id is None:
            return
        sys_id = self._sys_id
        self._sys_id = None
        self.system_status = None
        self._bus.publish(HeartbeatLost(sys_id))
        self._call_hook("on_heartbeat_lost", self._log_heartbeat_lost, sys_id)
        self._publish_status()

    def _publish_status(self) -> None:
        self._bus.publish(SystemStatusChanged(self.system_status))
        self._call_hook("on_system_status_changed", self._log_status_changed, self.system_status)

    # ------------------------------------------------------------------
    # Watchdog

    def _reset_watchdog(self) -> None:
        self._cancel_watchdog()
        generation = self._generation
        self._watchdog = self._timer_service.schedule(
            self._timeout, lambda: self._inbox.put((_WATCHDOG_EXPIRED, generation))
        )

    def _cancel_watchdog(self) -> None:
        # Any expiry already queued for the old generation becomes stale
        self._generation += 1
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    # ------------------------------------------------------------------
    # Hooks and their log-only defaults

    def _call_hook(self, name: str, default: Callable[..., None], *args: Any) -> None:
        hook = getattr(self._hooks, name) or default
        try:
            hook(*args)
        except Exception as e:
            self._logger.exception("Heartbeat monitor hook %s failed: %s", name, e)

    def _log_mode_changed(self, old: Optional[int], new: int) -> None:
        self._logger.info(
            "Mode change, %s -> %s",
            mode_name(self.vehicle_type, old),
            mode_name(self.vehicle_type, new),
        )

    def _log_armed_changed(self, armed: bool) -> None:
        self._logger.info("Armed changed: %s", armed)

    def _log_status_changed(self, status: Optional[int]) -> None:
        self._logger.error("Received new status: %s", system_status_name(status))

    def _log_heartbeat_lost(self, sys_id: int) -> None:
        self._logger.error("Lost heartbeat from sysId %d", sys_id)

    def _log_heartbeat_found(self, sys_id: int) -> None:
        self._logger.info("Contact established with sysId %d", sys_id)


def start_heartbeat_monitor(
    event_bus: EventBus,
    *,
    timeout_seconds: float = DEFAULT_HEARTBEAT_TIMEOUT_SEC,
    hooks: Optional[MonitorHooks] = None,
    reset_baseline_on_reacquire: bool = False,
) -> HeartbeatMonitor:
    """
    Create a HeartbeatMonitor and start its processing thread.

    Args:
        event_bus: Bus receiving link state events
        timeout_seconds: Silence after which the peer is declared lost
        hooks: Optional observer callbacks
        reset_baseline_on_reacquire: See HeartbeatMonitor

    Returns:
        The running monitor; call stop() to shut it down
    """
    monitor = HeartbeatMonitor(
        event_bus,
        timeout_seconds=timeout_seconds,
        hooks=hooks,
        reset_baseline_on_reacquire=reset_baseline_on_reacquire,
    )
    monitor.start()
    return monitor
