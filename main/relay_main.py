#!/usr/bin/env python3
"""
Heartbeat relay: watch a vehicle's MAVLink heartbeat and report link state.

Connects to the flight controller (or telemetry radio), feeds every HEARTBEAT
into the HeartbeatMonitor and logs contact, arming and status changes until
interrupted or until the link failsafe latches.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from config import RelayConfig, get_relay_config
from services.event_bus import EventBus
from services.heartbeat_monitor import HeartbeatMonitor, start_heartbeat_monitor
from services.mavlink_listener import attach_heartbeat_listener, detach_heartbeat_listener
from services.safety_manager import (
    attach_link_failsafe,
    get_failsafe_reason,
    is_failsafe_triggered,
    wait_for_failsafe,
)
from utils.logging_utils import setup_logging


def build_parser(cfg: RelayConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monitor a vehicle's MAVLink heartbeat and report link/arming/status changes."
    )
    parser.add_argument(
        "--connect",
        default=cfg.connection_string,
        help="dronekit connection string, e.g. udp:127.0.0.1:14550 (default: auto-detect serial port)",
    )
    parser.add_argument("--baud", type=int, default=cfg.baud, help=f"Serial baud rate (default: {cfg.baud})")
    parser.add_argument(
        "--timeout",
        type=float,
        default=cfg.heartbeat_timeout_sec,
        help=f"Seconds without heartbeat before contact is lost (default: {cfg.heartbeat_timeout_sec:g})",
    )
    parser.add_argument(
        "--clean-baseline",
        action="store_true",
        default=cfg.reset_baseline_on_reacquire,
        help="After a loss, compare the re-acquired vehicle against empty state instead of last-known values",
    )
    parser.add_argument(
        "--no-failsafe",
        action="store_true",
        help="Do not stop when an armed vehicle loses link",
    )
    parser.add_argument("--quiet", action="store_true", help="Only show warnings and errors on the console")
    return parser


def log_event(event) -> None:
    logging.info("EVENT: %s", event)


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point for the heartbeat relay."""
    from utils.connection import detect_and_connect

    cfg = get_relay_config()
    args = build_parser(cfg).parse_args(argv)

    setup_logging(
        detailed=cfg.logging_detailed,
        log_dir=cfg.logging_dir,
        log_prefix="relay",
        console_level=logging.WARNING if args.quiet else logging.INFO,
    )

    bus = EventBus()
    bus.subscribe_all(log_event)
    monitor: Optional[HeartbeatMonitor] = None
    vehicle = None
    listener = None

    try:
        vehicle, port = detect_and_connect(
            connection_string=args.connect,
            baud=args.baud,
            timeout_seconds=cfg.fc_connect_timeout,
        )
        logging.info("Connected vehicle object: %s via %s", vehicle, port)

        monitor = start_heartbeat_monitor(
            bus,
            timeout_seconds=args.timeout,
            reset_baseline_on_reacquire=args.clean_baseline,
        )
        if cfg.enable_link_failsafe and not args.no_failsafe:
            attach_link_failsafe(bus, monitor)
        listener = attach_heartbeat_listener(vehicle, monitor)

        # Runs until Ctrl-C, or until the failsafe latches
        wait_for_failsafe()
        if is_failsafe_triggered():
            logging.critical("Stopping relay: %s", get_failsafe_reason())

    except KeyboardInterrupt:
        logging.warning("KeyboardInterrupt received. Stopping relay.")
    except Exception as exc:
        logging.exception("Unhandled error in main(): %s", exc)
    finally:
        if vehicle is not None and listener is not None:
            try:
                detach_heartbeat_listener(vehicle, listener)
            except Exception as e:
                logging.exception("Error detaching heartbeat listener: %s", e)
        if monitor is not None:
            # Link is going away; report it before shutting the monitor down
            monitor.force_lost_heartbeat()
            monitor.stop()

        if vehicle is not None:
            try:
                vehicle.close()
                logging.info("Vehicle connection closed cleanly.")
            except Exception as e:
                logging.exception("Error closing vehicle: %s", e)
        else:
            logging.info("Relay finished with no vehicle to disconnect.")


if __name__ == "__main__":
    main()
