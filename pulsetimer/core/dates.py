"""Calendar-day bucketing and duration display helpers."""

from __future__ import annotations

import math
from datetime import datetime


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def today() -> datetime:
    return start_of_day(datetime.now())


def format_duration(seconds: float) -> str:
    if not math.isfinite(seconds):
        seconds = 0.0
    total = int(max(0.0, seconds))
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if hours > 0:
        return f"{hours:02d}h {minutes:02d}m {secs:02d}s"
    if minutes > 0:
        return f"{minutes:02d}m {secs:02d}s"
    return f"{secs:02d}s"


def parse_duration(text: str) -> float:
    """Parse ``"90"``, ``"1:30"`` or ``"1:02:03"`` into seconds."""
    parts = text.strip().split(":")
    if not parts or len(parts) > 3 or any(p.strip() == "" for p in parts):
        raise ValueError(f"Invalid duration '{text}'. Use SS, MM:SS or HH:MM:SS")
    try:
        values = [float(p) for p in parts]
    except ValueError as exc:
        raise ValueError(f"Invalid duration '{text}'. Use SS, MM:SS or HH:MM:SS") from exc
    if not all(math.isfinite(v) for v in values):
        raise ValueError(f"Invalid duration '{text}'")
    if any(v < 0 for v in values):
        raise ValueError(f"Invalid duration '{text}': negative component")
    seconds = 0.0
    for value in values:
        seconds = seconds * 60 + value
    return seconds
