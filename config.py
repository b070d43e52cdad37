#!/usr/bin/env python3
"""Configuration file for the heartbeat relay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# MAVLink peers are declared lost after this long without a heartbeat
DEFAULT_HEARTBEAT_TIMEOUT_SEC = 30.0


@dataclass
class RelayConfig:
    """Heartbeat relay configuration."""

    # Liveness
    heartbeat_timeout_sec: float = DEFAULT_HEARTBEAT_TIMEOUT_SEC
    reset_baseline_on_reacquire: bool = False  # compare re-acquired peer against empty state

    # Connection parameters
    connection_string: Optional[str] = None  # None = auto-detect serial port
    baud: int = 57600
    fc_connect_timeout: float = 30.0  # seconds to wait for the first heartbeat

    # Safety
    enable_link_failsafe: bool = True  # latch failsafe when an armed vehicle goes silent

    # Logging
    logging_detailed: bool = True  # Use DEBUG level logging
    logging_dir: str = "logs"  # Directory for log files


# Global config instance (can be overridden)
_relay_config: Optional[RelayConfig] = None


def get_relay_config() -> RelayConfig:
    """Get relay configuration (creates default if not set)."""
    global _relay_config
    if _relay_config is None:
        _relay_config = RelayConfig()
    return _relay_config


def set_relay_config(config: RelayConfig) -> None:
    """Set relay configuration."""
    global _relay_config
    _relay_config = config
