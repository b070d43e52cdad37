#!/usr/bin/env python3
"""Logging configuration utilities for the heartbeat relay."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime


def setup_logging(
    detailed: bool = True,
    log_dir: str = "logs",
    log_prefix: str = "relay",
    console_level: int = logging.INFO,
) -> str:
    """
    Configure logging to a timestamped file and to the console.

    Args:
        detailed: If True, the file log records DEBUG, else INFO
        log_dir: Directory for log files
        log_prefix: Prefix for log filename
        console_level: Minimum level shown on the console

    Returns:
        Path to the log file that was created.
    """
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        # If directory creation fails, fallback to current directory
        log_dir = "."

    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    log_filename = os.path.join(log_dir, f"{log_prefix}_{ts}.log")

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if detailed else logging.INFO)

    # File handler keeps logger names so monitor/bus/listener output can be told apart
    fh = logging.FileHandler(log_filename, encoding="utf-8")
    fh.setLevel(logging.DEBUG if detailed else logging.INFO)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )
    logger.addHandler(fh)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(ch)

    logging.info("Logging initialized. Log file: %s", log_filename)
    return log_filename
