#!/usr/bin/env python3
"""Serial port discovery and dronekit connection for the heartbeat relay."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import serial.tools.list_ports

from utils.compat import ensure_dronekit_compat

ensure_dronekit_compat()

from dronekit import Vehicle, connect

# Silence verbose dronekit logs by default; callers can override this logger.
logging.getLogger("dronekit").setLevel(logging.CRITICAL)

# Ordered preference for serial devices.
DEFAULT_PRIORITY_PORTS: Tuple[str, ...] = (
    "/dev/ttyACM0",
    "/dev/ttyACM1",
    "/dev/ttyUSB0",
    "/dev/ttyUSB1",
)


def list_serial_ports() -> List[str]:
    """
    Return candidate telemetry devices (ACM/USB) detected on the system.

    Returns:
        List of serial port device paths
    """
    ports = [
        p.device
        for p in serial.tools.list_ports.comports()
        if ("ACM" in p.device or "USB" in p.device)
    ]
    logging.debug("Detected serial ports: %s", ports)
    return ports


def order_ports(
    detected_ports: Iterable[str],
    priority_ports: Sequence[str] = DEFAULT_PRIORITY_PORTS,
) -> Tuple[str, ...]:
    """Return detected ports with the configured priority ports first."""
    detected = list(detected_ports)
    prioritized = [port for port in priority_ports if port in detected]
    remaining = [port for port in detected if port not in priority_ports]
    return tuple(prioritized + remaining)


def connect_vehicle(connection_string: str, *, baud: int = 57600, timeout_seconds: float = 30.0) -> Vehicle:
    """
    Open a MAVLink connection without waiting for parameters or attributes.

    Only heartbeats are needed by the relay, so ``wait_ready`` is off and
    ``timeout_seconds`` bounds the wait for the first heartbeat.

    Raises:
        RuntimeError: If dronekit cannot establish the link
    """
    logging.info("Connecting to %s @ %d (timeout %.0f s)", connection_string, baud, timeout_seconds)
    try:
        return connect(
            connection_string,
            baud=baud,
            wait_ready=False,
            heartbeat_timeout=timeout_seconds,
        )
    except Exception as e:
        raise RuntimeError(f"Could not connect to {connection_string}: {e}") from e


def detect_and_connect(
    *,
    connection_string: Optional[str] = None,
    baud: int = 57600,
    timeout_seconds: float = 30.0,
    priority_ports: Sequence[str] = DEFAULT_PRIORITY_PORTS,
) -> Tuple[Vehicle, str]:
    """
    Connect to ``connection_string`` or, if None, the first responsive serial port.

    Returns:
        Tuple of (vehicle, connection string used)

    Raises:
        RuntimeError: If no candidate could be connected
    """
    if connection_string:
        return connect_vehicle(connection_string, baud=baud, timeout_seconds=timeout_seconds), connection_string

    candidates = order_ports(list_serial_ports(), priority_ports)
    if not candidates:
        raise RuntimeError("No telemetry device found on /dev/ttyACM* or /dev/ttyUSB*")

    for port in candidates:
        try:
            return connect_vehicle(port, baud=baud, timeout_seconds=timeout_seconds), port
        except RuntimeError as e:
            logging.warning("%s; trying next port", e)

    raise RuntimeError(f"Could not connect to any of {list(candidates)}")
