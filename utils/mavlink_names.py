#!/usr/bin/env python3
"""Human-readable names for MAVLink heartbeat codes."""

from __future__ import annotations

from typing import Optional

from pymavlink import mavutil


def mode_name(vehicle_type: Optional[int], custom_mode: Optional[int]) -> str:
    """
    Return the ArduPilot flight mode name for ``custom_mode``.

    Falls back to the raw number when the vehicle type has no known mapping.
    """
    if custom_mode is None:
        return "None"
    if vehicle_type is not None:
        mapping = mavutil.mode_mapping_bynumber(vehicle_type)
        if mapping and custom_mode in mapping:
            return mapping[custom_mode]
    return str(custom_mode)


def system_status_name(status: Optional[int]) -> str:
    """Return the MAV_STATE name for ``status`` (e.g. MAV_STATE_ACTIVE)."""
    if status is None:
        return "None"
    entry = mavutil.mavlink.enums.get("MAV_STATE", {}).get(status)
    return entry.name if entry is not None else str(status)
