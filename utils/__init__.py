"""Utility helpers for the heartbeat relay."""

from utils.logging_utils import setup_logging
from utils.mavlink_names import mode_name, system_status_name

__all__ = [
    "mode_name",
    "setup_logging",
    "system_status_name",
]
