#!/usr/bin/env python3
"""
Heartbeat relay launcher.

The implementation lives in main/relay_main.py; this file lets the relay be
started from the repository root.
"""

from __future__ import annotations

if __name__ == "__main__":
    from main.relay_main import main

    main()
