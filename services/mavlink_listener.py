#!/usr/bin/env python3
"""Feed HEARTBEAT messages from a dronekit vehicle into a HeartbeatMonitor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from services.heartbeat_events import HeartbeatMessage
from services.heartbeat_monitor import HeartbeatMonitor

if TYPE_CHECKING:
    from dronekit import Vehicle

HEARTBEAT_MESSAGE = "HEARTBEAT"

HeartbeatListener = Callable[[Any, str, Any], None]


def attach_heartbeat_listener(vehicle: "Vehicle", monitor: HeartbeatMonitor) -> HeartbeatListener:
    """
    Register a dronekit message listener that forwards heartbeats to ``monitor``.

    Args:
        vehicle: Connected dronekit vehicle
        monitor: Monitor receiving the decoded heartbeats

    Returns:
        The registered listener, for detach_heartbeat_listener()
    """
    logger = logging.getLogger("MavlinkListener")

    def heartbeat_listener(_vehicle, name: str, message) -> None:
        """Decode one HEARTBEAT and queue it on the monitor."""
        try:
            hb = HeartbeatMessage.from_mavlink(message)
        except ValueError as e:
            logger.warning("Dropping undecodable %s: %s", name, e)
            return
        logger.debug("MAVLINK [%s] %s", name, hb)
        monitor.submit_heartbeat(hb)

    vehicle.add_message_listener(HEARTBEAT_MESSAGE, heartbeat_listener)
    logger.info("Heartbeat listener attached.")
    return heartbeat_listener


def detach_heartbeat_listener(vehicle: "Vehicle", listener: HeartbeatListener) -> None:
    """Remove a listener registered by attach_heartbeat_listener()."""
    vehicle.remove_message_listener(HEARTBEAT_MESSAGE, listener)
    logging.getLogger("MavlinkListener").info("Heartbeat listener detached.")
