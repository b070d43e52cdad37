"""Service layer modules for heartbeat monitoring."""

from services.event_bus import EventBus
from services.heartbeat_events import (
    ArmChanged,
    HeartbeatFound,
    HeartbeatLost,
    HeartbeatMessage,
    MonitorSnapshot,
    SystemStatusChanged,
)
from services.heartbeat_monitor import HeartbeatMonitor, MonitorHooks, start_heartbeat_monitor
from services.mavlink_listener import attach_heartbeat_listener, detach_heartbeat_listener
from services.safety_manager import (
    attach_link_failsafe,
    get_failsafe_reason,
    is_failsafe_triggered,
    reset_failsafe,
    trigger_failsafe,
)
from services.watchdog_timer import ThreadingTimerService

__all__ = [
    "ArmChanged",
    "EventBus",
    "HeartbeatFound",
    "HeartbeatLost",
    "HeartbeatMessage",
    "HeartbeatMonitor",
    "MonitorHooks",
    "MonitorSnapshot",
    "SystemStatusChanged",
    "ThreadingTimerService",
    "attach_heartbeat_listener",
    "attach_link_failsafe",
    "detach_heartbeat_listener",
    "get_failsafe_reason",
    "is_failsafe_triggered",
    "reset_failsafe",
    "start_heartbeat_monitor",
    "trigger_failsafe",
]
