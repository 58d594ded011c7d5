"""Timestamp parsing and formatting."""

from __future__ import annotations

import math


def parse_timestamp(value: str | int | float) -> int:
    """Convert a transcript timestamp to whole seconds.

    Accepts ``"MM:SS"`` (minutes may exceed 59), ``"H:MM:SS"`` and bare
    numbers. Raises ValueError for anything else.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Non-finite timestamp: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"Negative timestamp: {value!r}")
        return int(value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")

    parts = value.strip().split(":")
    if not 1 <= len(parts) <= 3 or not all(p.strip().isdigit() for p in parts):
        raise ValueError(f"Invalid timestamp: {value!r}")

    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds


def format_duration(seconds: int | None) -> str:
    """Format seconds as MM:SS, or HH:MM:SS past the hour."""
    if seconds is None:
        return "--:--"
    seconds = max(int(seconds), 0)
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
