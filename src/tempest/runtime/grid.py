"""
Guide grid math: slot boundaries defined once, centrally.

Pure functions for the program guide's fixed-width columns (30 minutes by
default). Schedules themselves are not grid-aligned; only the guide is.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


GRID_MINUTES = 30


def grid_start(now: datetime, grid_minutes: int = GRID_MINUTES) -> datetime:
    """Start of the current grid block (floor to :00 or :30).

    Args:
        now: Wall-clock time (aware preferred; naive is floored in UTC).
        grid_minutes: Grid size in minutes (default 30).

    Returns:
        Start of the block containing `now`.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    minutes_into_day = now.hour * 60 + now.minute
    block_minutes = (minutes_into_day // grid_minutes) * grid_minutes
    return now.replace(
        hour=block_minutes // 60, minute=block_minutes % 60, second=0, microsecond=0
    )


def time_slots(
    start: datetime, end: datetime, grid_minutes: int = GRID_MINUTES
) -> list[datetime]:
    """Slot boundaries from ``start`` (inclusive) to ``end`` (exclusive)."""
    if grid_minutes <= 0:
        raise ValueError("grid_minutes must be positive")
    step = timedelta(minutes=grid_minutes)
    slots: list[datetime] = []
    current = start
    while current < end:
        slots.append(current)
        current += step
    return slots
