"""
EPG (Electronic Program Guide) query surface.

Thin read-side wrapper over the scheduling engine. This is where caller
input is validated: malformed ranges raise InvalidInputError here, before
anything reaches the engine. Missing data is never an error.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from ..infra.exceptions import InvalidInputError
from ..runtime.config import ChannelConfig, ChannelConfigProvider
from ..runtime.schedule_types import GuideData, ScheduleItem, ScheduleStats
from ..scheduling.engine import SchedulingEngine

MAX_GUIDE_HOURS = 7 * 24
DAYS_AHEAD = 7


def ensure_aware(value: datetime, name: str = "timestamp") -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise InvalidInputError(f"{name} must include a timezone offset")
    return value


def validate_range(start: datetime | None, end: datetime | None) -> None:
    if start is not None:
        ensure_aware(start, "start")
    if end is not None:
        ensure_aware(end, "end")
    if start is not None and end is not None and end <= start:
        raise InvalidInputError("end must be after start")


def validate_hours(hours: int | None) -> None:
    if hours is not None and not 0 < hours <= MAX_GUIDE_HOURS:
        raise InvalidInputError(f"hours must be between 1 and {MAX_GUIDE_HOURS}")


class EpgService:
    """Program guide queries for the UI and API layers."""

    def __init__(self, engine: SchedulingEngine, channels: ChannelConfigProvider) -> None:
        self._engine = engine
        self._channels = channels

    def list_channels(self) -> list[ChannelConfig]:
        return self._channels.list_channels()

    def get_channel(self, channel_id: str) -> ChannelConfig | None:
        return self._channels.get_channel(channel_id)

    def current_program(self, channel_id: str) -> ScheduleItem | None:
        return self._engine.get_current_program(channel_id)

    def next_program(self, channel_id: str) -> ScheduleItem | None:
        return self._engine.get_next_program(channel_id)

    def current_programs(self) -> dict[str, ScheduleItem]:
        """Now playing per channel; channels with nothing airing are left out."""
        return {cid: item for cid, item in self._engine.get_all_current_programs().items() if item}

    def next_programs(self) -> dict[str, ScheduleItem]:
        return {cid: item for cid, item in self._engine.get_all_next_programs().items() if item}

    def channel_schedule(
        self, channel_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[ScheduleItem]:
        validate_range(start, end)
        return self._engine.get_channel_schedule(channel_id, start, end)

    def all_channels_schedule(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> dict[str, list[ScheduleItem]]:
        validate_range(start, end)
        return self._engine.get_all_channels_schedule(start, end)

    def day_schedule(self, channel_id: str, day_offset: int = 0) -> list[ScheduleItem]:
        """Schedule for today (offset 0) through six days ahead."""
        if not 0 <= day_offset < DAYS_AHEAD:
            raise InvalidInputError(f"day_offset must be between 0 and {DAYS_AHEAD - 1}")
        day = self._engine.today() + timedelta(days=day_offset)
        return self._engine.get_channel_schedule_for_date(channel_id, day)

    def guide(self, start: datetime | None = None, hours: int | None = None) -> GuideData:
        if start is not None:
            ensure_aware(start, "start")
        validate_hours(hours)
        return self._engine.get_guide_data(start, hours)

    def search(self, query: str) -> list[ScheduleItem]:
        query = query.strip()
        if not query:
            return []
        return self._engine.search_programs(query)

    def stats(self) -> ScheduleStats:
        return self._engine.get_schedule_stats()
