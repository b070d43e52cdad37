#!/usr/bin/env python3
"""Compatibility helpers for legacy dependencies."""

from __future__ import annotations

import collections
import collections.abc

# ABCs dronekit still looks up on the top-level collections module
_DRONEKIT_ABC_ALIASES = ("MutableMapping", "Mapping", "MutableSequence", "Sequence")


def ensure_dronekit_compat() -> None:
    """Restore collections ABC aliases removed in Python 3.10 so dronekit imports."""
    for name in _DRONEKIT_ABC_ALIASES:
        if not hasattr(collections, name):
            setattr(collections, name, getattr(collections.abc, name))
