#!/usr/bin/env python3
"""Heartbeat input message and change-event records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class HeartbeatMessage:
    """Decoded HEARTBEAT fields the monitor cares about."""

    sys_id: int
    type: int  # MAV_TYPE of the sender
    custom_mode: int
    base_mode: int  # MAV_MODE_FLAG bitmask
    autopilot: int  # MAV_AUTOPILOT code
    system_status: int  # MAV_STATE code

    @classmethod
    def from_mavlink(cls, msg: Any) -> "HeartbeatMessage":
        """
        Build a HeartbeatMessage from a pymavlink HEARTBEAT message.

        Args:
            msg: pymavlink ``MAVLink_heartbeat_message`` (or anything with the same fields)

        Returns:
            The decoded message

        Raises:
            ValueError: If ``msg`` does not carry heartbeat fields
        """
        try:
            return cls(
                sys_id=int(msg.get_srcSystem()),
                type=int(msg.type),
                custom_mode=int(msg.custom_mode),
                base_mode=int(msg.base_mode),
                autopilot=int(msg.autopilot),
                system_status=int(msg.system_status),
            )
        except (AttributeError, TypeError) as e:
            raise ValueError(f"Not a HEARTBEAT message: {msg!r}") from e


@dataclass(frozen=True)
class HeartbeatFound:
    """Contact established with ``sys_id``."""

    sys_id: int


@dataclass(frozen=True)
class HeartbeatLost:
    """No heartbeat from ``sys_id`` within the watchdog timeout."""

    sys_id: int


@dataclass(frozen=True)
class ArmChanged:
    armed: bool


@dataclass(frozen=True)
class SystemStatusChanged:
    status: Optional[int]  # None once contact is lost


@dataclass(frozen=True)
class MonitorSnapshot:
    """Point-in-time copy of the monitor state."""

    sys_id: Optional[int]
    custom_mode: Optional[int]
    base_mode: Optional[int]
    system_status: Optional[int]
    vehicle_type: Optional[int]
    autopilot_type: Optional[int]
    armed: bool
    has_been_armed: bool

    @property
    def in_contact(self) -> bool:
        return self.sys_id is not None
