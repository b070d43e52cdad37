"""Main entry points for the heartbeat relay."""

from main.relay_main import main

__all__ = ["main"]
