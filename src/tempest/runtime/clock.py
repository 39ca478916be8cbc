"""Master clock abstractions used for scheduling logic.

Every component that needs "now" asks an injected master clock instead of
calling :func:`datetime.now` directly, so tests can pin or step time without
sleeping.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from threading import Lock
from typing import Protocol, runtime_checkable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@runtime_checkable
class MasterClock(Protocol):
    """Protocol implemented by master clock providers."""

    def now_utc(self) -> datetime:
        """Return current UTC time as an aware datetime."""
        ...


class SystemMasterClock:
    """Wall-clock master clock providing timezone-aware timestamps."""

    def now_utc(self) -> datetime:
        """Return current UTC time as an aware datetime."""
        return datetime.now(timezone.utc)


class ControllableMasterClock:
    """Deterministic master clock used for tests.

    Time only moves when :meth:`advance` or :meth:`set` is called.
    """

    def __init__(self, epoch: datetime | None = None) -> None:
        if epoch is None:
            epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)
        ensure_aware(epoch)
        self._current = epoch.astimezone(timezone.utc)
        self._lock = Lock()

    def now_utc(self) -> datetime:
        with self._lock:
            return self._current

    def advance(self, seconds: float = 0.0, **kwargs: float) -> datetime:
        """Advance the clock by ``seconds`` (plus any timedelta keyword parts)."""
        delta = timedelta(seconds=seconds, **kwargs)
        if delta < timedelta(0):
            raise ValueError("clock cannot move backwards")
        with self._lock:
            self._current += delta
            return self._current

    def set(self, when: datetime) -> None:
        """Jump to an absolute aware timestamp."""
        ensure_aware(when)
        with self._lock:
            self._current = when.astimezone(timezone.utc)


def ensure_aware(dt: datetime) -> None:
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        raise ValueError("Datetime must be timezone-aware")


def resolve_timezone(tz: str | tzinfo | None) -> tzinfo:
    if tz is None:
        return timezone.utc
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def start_of_day(dt: datetime, tz: tzinfo) -> datetime:
    """Midnight of the calendar day containing ``dt`` in ``tz``."""
    local = dt.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)
