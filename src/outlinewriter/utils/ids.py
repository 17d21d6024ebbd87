"""ID utilities."""

from __future__ import annotations

import itertools
import uuid


def new_point_id() -> str:
    """Return a fresh, opaque outline point id."""

    return uuid.uuid4().hex


def run_counter() -> itertools.count:
    """Return a counter that numbers generation runs starting from 1."""

    return itertools.count(1)


def format_run_id(n: int, prefix: str = "run_") -> str:
    """Format a numeric counter to a run id (e.g., run_0001)."""

    return f"{prefix}{n:04d}"
