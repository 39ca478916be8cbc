"""
SchedulingEngine — builds and serves gapless 24/7 channel schedules.

For every channel the engine packs catalog assets back to back across a
rolling window (7 days from the start of the current day), choosing assets
by time-of-day suitability. Channels without assets get a placeholder
schedule of 2-hour blocks covering one day.

Generated schedules live only in memory. Each regeneration, explicit
scheduling call or pointer refresh builds a new ScheduleSnapshot and swaps
it in with one reference assignment, so readers never see a half-built
schedule. All writers are serialized through a single lock.
"""

from __future__ import annotations

import bisect
import math
import random
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone, tzinfo

from ..catalog.video_library import VideoLibraryManager
from ..infra.exceptions import InvalidInputError
from ..infra.logging import get_logger
from ..runtime.clock import MasterClock, SystemMasterClock, resolve_timezone, start_of_day
from ..runtime.config import ChannelConfig, ChannelConfigProvider
from ..runtime.constants import (
    DEFAULT_SCHEDULED_SECONDS,
    EMPTY_SLOT_SKIP,
    GUIDE_HOURS_TO_SHOW,
    GUIDE_MINUTES_PER_SLOT,
    MIN_SLOT_SECONDS,
    PLACEHOLDER_BLOCK,
    PLACEHOLDER_THUMBNAIL,
    PLACEHOLDER_WINDOW,
    SCHEDULE_WINDOW,
)
from ..runtime.grid import time_slots
from ..runtime.schedule_types import (
    ContentKind,
    GuideData,
    OperationResult,
    ScheduleItem,
    ScheduleStats,
    VideoAsset,
    make_item_id,
)
from .slot_rules import classify_content_kind, select_asset_for_slot

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScheduleSnapshot:
    """Immutable view of every channel's schedule at one point in time."""

    schedules: dict[str, tuple[ScheduleItem, ...]] = field(default_factory=dict)
    day_cache: dict[tuple[str, date], tuple[ScheduleItem, ...]] = field(default_factory=dict)
    current_programs: dict[str, ScheduleItem | None] = field(default_factory=dict)
    generated_at: datetime | None = None
    window_start: datetime | None = None
    window_end: datetime | None = None


def _ceil_minutes(seconds: float) -> timedelta:
    return timedelta(minutes=math.ceil(seconds / 60))


def _ensure_aware(value: datetime, name: str) -> None:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise InvalidInputError(f"{name} must be timezone-aware")


class SchedulingEngine:
    """Per-channel schedule generation, caching and lookup.

    Read operations never raise for missing data: unknown channels and empty
    windows resolve to None or an empty list.
    """

    def __init__(
        self,
        library: VideoLibraryManager,
        channels: ChannelConfigProvider,
        clock: MasterClock | None = None,
        rng: random.Random | None = None,
        tz: str | tzinfo | None = None,
        window: timedelta = SCHEDULE_WINDOW,
        placeholder_window: timedelta = PLACEHOLDER_WINDOW,
        guide_hours_to_show: int = GUIDE_HOURS_TO_SHOW,
        guide_minutes_per_slot: int = GUIDE_MINUTES_PER_SLOT,
    ) -> None:
        if window <= timedelta(0) or placeholder_window <= timedelta(0):
            raise ValueError("schedule windows must be positive")
        self._library = library
        self._channels = channels
        self._clock = clock or SystemMasterClock()
        self._rng = rng or random.Random()
        self._tz = resolve_timezone(tz)
        self._window = window
        self._placeholder_window = placeholder_window
        self._guide_hours = guide_hours_to_show
        self._guide_minutes_per_slot = guide_minutes_per_slot

        self._write_lock = threading.Lock()
        self._snapshot = ScheduleSnapshot(
            schedules={c.channel_id: () for c in channels.list_channels()},
            current_programs={c.channel_id: None for c in channels.list_channels()},
        )

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> ScheduleSnapshot:
        return self._snapshot

    @property
    def last_regenerated_at(self) -> datetime | None:
        return self._snapshot.generated_at

    @property
    def clock(self) -> MasterClock:
        return self._clock

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    def today(self) -> date:
        """Current calendar day in the engine timezone."""
        return self._clock.now_utc().astimezone(self._tz).date()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_channel_schedule(
        self,
        channel_id: str,
        window_start: datetime,
        rng: random.Random | None = None,
    ) -> list[ScheduleItem]:
        """Build one channel's schedule starting at ``window_start``.

        Pure with respect to engine state: the result is returned, not stored.
        """
        _ensure_aware(window_start, "window_start")
        rng = rng or self._rng
        start = window_start.astimezone(timezone.utc)
        channel = self._channels.get_channel(channel_id)

        assets = self._schedulable_assets(channel_id)
        if not assets:
            return self._generate_placeholder_schedule(channel_id, channel, start)

        window_end = start + self._window
        items: list[ScheduleItem] = []
        pool = list(assets)
        current = start
        while current < window_end:
            hour = current.astimezone(self._tz).hour
            asset = select_asset_for_slot(pool, hour, rng)
            if asset is None:
                # Every asset was rejected; leave an hour-long gap and retry.
                current += EMPTY_SLOT_SKIP
                continue
            try:
                item = self._build_generated_item(channel_id, asset, current, hour, rng)
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "schedule.asset_skipped", channel_id=channel_id, asset_id=asset.id, reason=str(exc)
                )
                pool = [a for a in pool if a.id != asset.id]
                continue
            items.append(item)
            current = item.end_time
        return items

    def _schedulable_assets(self, channel_id: str) -> list[VideoAsset]:
        usable = []
        for asset in self._library.get_channel_assets(channel_id):
            duration = asset.duration_seconds
            if not isinstance(duration, int) or isinstance(duration, bool) or duration < 0:
                logger.warning(
                    "schedule.asset_skipped", channel_id=channel_id, asset_id=asset.id,
                    reason=f"invalid duration {duration!r}",
                )
                continue
            usable.append(asset)
        return usable

    def _build_generated_item(
        self,
        channel_id: str,
        asset: VideoAsset,
        start: datetime,
        hour: int,
        rng: random.Random,
    ) -> ScheduleItem:
        effective_seconds = max(asset.duration_seconds, MIN_SLOT_SECONDS)
        kind = classify_content_kind(hour, rng)
        return ScheduleItem(
            id=make_item_id(channel_id, start, asset.id),
            channel_id=channel_id,
            asset_id=asset.id,
            title=asset.title,
            description=asset.description,
            start_time=start,
            end_time=start + _ceil_minutes(effective_seconds),
            content_kind=kind,
            thumbnail=asset.thumbnail_path,
            is_live=kind is ContentKind.LIVE,
            metadata={
                "originalDurationSeconds": asset.duration_seconds,
                "category": asset.category,
                "tags": tuple(asset.tags),
                "sourceReference": asset.source_reference,
            },
        )

    def _generate_placeholder_schedule(
        self, channel_id: str, channel: ChannelConfig | None, start: datetime
    ) -> list[ScheduleItem]:
        name = channel.name if channel else channel_id
        end = start + self._placeholder_window
        items = []
        current = start
        while current < end:
            items.append(
                ScheduleItem(
                    id=make_item_id(channel_id, current, None, kind="placeholder"),
                    channel_id=channel_id,
                    title=f"{name} Programming",
                    description=f"Coming soon to {name}",
                    start_time=current,
                    end_time=current + PLACEHOLDER_BLOCK,
                    content_kind=ContentKind.VOD,
                    thumbnail=PLACEHOLDER_THUMBNAIL,
                    metadata={"isPlaceholder": True},
                )
            )
            current += PLACEHOLDER_BLOCK
        return items

    def regenerate(self) -> bool:
        """Rebuild every channel's schedule from the start of today.

        On failure the previous schedule stays in place and False is returned.
        """
        with self._write_lock:
            now = self._clock.now_utc()
            window_start = start_of_day(now, self._tz).astimezone(timezone.utc)
            try:
                schedules = {
                    channel.channel_id: tuple(
                        self.generate_channel_schedule(channel.channel_id, window_start)
                    )
                    for channel in self._channels.list_channels()
                }
            except Exception:
                logger.exception("schedule.regeneration_failed")
                return False

            self._snapshot = ScheduleSnapshot(
                schedules=schedules,
                day_cache=self._build_day_cache(schedules, now),
                current_programs=self._find_current_programs(schedules, now),
                generated_at=now,
                window_start=window_start,
                window_end=window_start + self._window,
            )
        logger.info(
            "schedule.regenerated",
            channels=len(schedules),
            programs=sum(len(s) for s in schedules.values()),
            window_start=window_start.isoformat(),
        )
        return True

    def force_regenerate(self) -> None:
        self.regenerate()

    # ------------------------------------------------------------------
    # Cache maintenance
    # ------------------------------------------------------------------

    def _build_day_cache(
        self, schedules: dict[str, tuple[ScheduleItem, ...]], now: datetime
    ) -> dict[tuple[str, date], tuple[ScheduleItem, ...]]:
        first_day = now.astimezone(self._tz).date()
        days = [first_day + timedelta(days=i) for i in range(self._window.days)]
        cache: dict[tuple[str, date], tuple[ScheduleItem, ...]] = {}
        for channel_id, items in schedules.items():
            buckets: dict[date, list[ScheduleItem]] = {day: [] for day in days}
            for item in items:
                bucket = buckets.get(item.start_time.astimezone(self._tz).date())
                if bucket is not None:
                    bucket.append(item)
            for day, bucket in buckets.items():
                cache[(channel_id, day)] = tuple(bucket)
        return cache

    @staticmethod
    def _find_current_program(items: Sequence[ScheduleItem], now: datetime) -> ScheduleItem | None:
        index = bisect.bisect_right(items, now, key=lambda i: i.start_time) - 1
        if index >= 0 and items[index].contains(now):
            return items[index]
        return None

    def _find_current_programs(
        self, schedules: dict[str, tuple[ScheduleItem, ...]], now: datetime
    ) -> dict[str, ScheduleItem | None]:
        return {cid: self._find_current_program(items, now) for cid, items in schedules.items()}

    def refresh_current_programs(self) -> None:
        """Re-point each channel's "now playing" entry. Cheap: no regeneration."""
        with self._write_lock:
            snapshot = self._snapshot
            now = self._clock.now_utc()
            self._snapshot = replace(
                snapshot, current_programs=self._find_current_programs(snapshot.schedules, now)
            )

    def _replace_channel_schedule(self, channel_id: str, items: Iterable[ScheduleItem]) -> None:
        """Swap in a new list for one channel; caller holds the write lock."""
        snapshot = self._snapshot
        schedules = dict(snapshot.schedules)
        schedules[channel_id] = tuple(sorted(items, key=lambda i: i.start_time))
        now = self._clock.now_utc()
        self._snapshot = replace(
            snapshot,
            schedules=schedules,
            day_cache=self._build_day_cache(schedules, now),
            current_programs=self._find_current_programs(schedules, now),
        )

    # ------------------------------------------------------------------
    # Explicit scheduling
    # ------------------------------------------------------------------

    def schedule_asset(
        self,
        channel_id: str,
        asset_id: str,
        start_time: datetime,
        duration_seconds: int | None = None,
    ) -> OperationResult:
        """Place ``asset_id`` at ``start_time``, evicting every overlapping item.

        Overlapping items are removed whole, never truncated.

        Raises:
            InvalidInputError: naive ``start_time`` or negative duration.
        """
        _ensure_aware(start_time, "start_time")
        if duration_seconds is not None and duration_seconds < 0:
            raise InvalidInputError("duration_seconds must not be negative")

        if self._channels.get_channel(channel_id) is None:
            return OperationResult.failure("channel_not_found")
        asset = self._library.get_asset(asset_id)
        if asset is None:
            return OperationResult.failure("asset_not_found")

        seconds = duration_seconds or asset.duration_seconds or DEFAULT_SCHEDULED_SECONDS
        start = start_time.astimezone(timezone.utc)
        end = start + _ceil_minutes(seconds)
        item = ScheduleItem(
            id=make_item_id(channel_id, start, asset.id, kind="scheduled"),
            channel_id=channel_id,
            asset_id=asset.id,
            title=asset.title,
            description=asset.description,
            start_time=start,
            end_time=end,
            content_kind=ContentKind.VOD,
            thumbnail=asset.thumbnail_path,
            metadata={
                "scheduled": True,
                "originalDurationSeconds": asset.duration_seconds,
                "category": asset.category,
                "tags": tuple(asset.tags),
            },
        )

        with self._write_lock:
            existing = self._snapshot.schedules.get(channel_id, ())
            kept = [i for i in existing if not i.overlaps(start, end)]
            evicted = len(existing) - len(kept)
            self._replace_channel_schedule(channel_id, [*kept, item])

        logger.info(
            "schedule.asset_scheduled",
            channel_id=channel_id,
            asset_id=asset_id,
            start=start.isoformat(),
            end=end.isoformat(),
            evicted=evicted,
        )
        return OperationResult.success(item)

    def remove_scheduled_item(self, channel_id: str, item_id: str) -> OperationResult:
        with self._write_lock:
            existing = self._snapshot.schedules.get(channel_id)
            if existing is None:
                return OperationResult.failure("channel_not_found")
            removed = next((i for i in existing if i.id == item_id), None)
            if removed is None:
                return OperationResult.failure("program_not_found")
            self._replace_channel_schedule(channel_id, [i for i in existing if i.id != item_id])
        logger.info("schedule.item_removed", channel_id=channel_id, item_id=item_id)
        return OperationResult.success(removed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current_program(self, channel_id: str) -> ScheduleItem | None:
        snapshot = self._snapshot
        now = self._clock.now_utc()
        pointer = snapshot.current_programs.get(channel_id)
        if pointer is not None and pointer.contains(now):
            return pointer
        return self._find_current_program(snapshot.schedules.get(channel_id, ()), now)

    def get_next_program(self, channel_id: str) -> ScheduleItem | None:
        """Earliest item starting strictly after now; None once the window is exhausted."""
        items = self._snapshot.schedules.get(channel_id, ())
        now = self._clock.now_utc()
        index = bisect.bisect_right(items, now, key=lambda i: i.start_time)
        return items[index] if index < len(items) else None

    def get_all_current_programs(self) -> dict[str, ScheduleItem | None]:
        return {c.channel_id: self.get_current_program(c.channel_id) for c in self._channels.list_channels()}

    def get_all_next_programs(self) -> dict[str, ScheduleItem | None]:
        return {c.channel_id: self.get_next_program(c.channel_id) for c in self._channels.list_channels()}

    def get_channel_schedule(
        self,
        channel_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ScheduleItem]:
        """Items overlapping ``[start, end)``; the whole schedule when neither is given.

        A missing start defaults to now and a missing end to the guide horizon.

        Raises:
            InvalidInputError: naive ``start`` or ``end``.
        """
        for name, value in (("start", start), ("end", end)):
            if value is not None:
                _ensure_aware(value, name)
        items = self._snapshot.schedules.get(channel_id, ())
        if start is None and end is None:
            return list(items)
        start = start or self._clock.now_utc()
        end = end or start + timedelta(hours=self._guide_hours)
        if end <= start:
            return []
        return [i for i in items if i.overlaps(start, end)]

    def get_all_channels_schedule(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> dict[str, list[ScheduleItem]]:
        return {
            c.channel_id: self.get_channel_schedule(c.channel_id, start, end)
            for c in self._channels.list_channels()
        }

    def get_channel_schedule_for_date(self, channel_id: str, day: date) -> list[ScheduleItem]:
        """Items starting on ``day`` (engine timezone), served from the day cache."""
        snapshot = self._snapshot
        cached = snapshot.day_cache.get((channel_id, day))
        if cached is not None:
            return list(cached)
        return [
            i
            for i in snapshot.schedules.get(channel_id, ())
            if i.start_time.astimezone(self._tz).date() == day
        ]

    def get_guide_data(self, start: datetime | None = None, hours: int | None = None) -> GuideData:
        """Guide window: 30-minute slot boundaries plus every channel's overlapping items.

        Items straddling the window edges are included unclipped.

        Raises:
            InvalidInputError: naive ``start``.
        """
        if start is not None:
            _ensure_aware(start, "start")
        start = start or self._clock.now_utc()
        hours = self._guide_hours if hours is None else hours
        end = start + timedelta(hours=max(hours, 0))
        channels = self._channels.list_channels()
        return GuideData(
            start=start,
            end=end,
            time_slots=time_slots(start, end, self._guide_minutes_per_slot),
            channels=channels,
            programs_by_channel={
                c.channel_id: self.get_channel_schedule(c.channel_id, start, end) for c in channels
            },
        )

    def get_program(self, program_id: str) -> ScheduleItem | None:
        for items in self._snapshot.schedules.values():
            for item in items:
                if item.id == program_id:
                    return item
        return None

    def search_programs(self, query: str) -> list[ScheduleItem]:
        """Case-insensitive title/description search, ordered by start time."""
        needle = query.lower()
        order = {c.channel_id: c.sort_order for c in self._channels.list_channels()}
        results = [
            item
            for items in self._snapshot.schedules.values()
            for item in items
            if needle in item.title.lower() or needle in item.description.lower()
        ]
        return sorted(results, key=lambda i: (i.start_time, order.get(i.channel_id, 0), i.id))

    def get_schedule_stats(self) -> ScheduleStats:
        snapshot = self._snapshot
        per_channel = {cid: len(items) for cid, items in snapshot.schedules.items()}
        distribution = {kind.value: 0 for kind in ContentKind}
        total_seconds = 0.0
        for items in snapshot.schedules.values():
            for item in items:
                total_seconds += item.duration_seconds
                distribution[item.content_kind.value] += 1
        total = sum(per_channel.values())
        average = round(total_seconds / total / 60, 2) if total else 0.0
        return ScheduleStats(
            total_programs=total,
            per_channel_counts=per_channel,
            average_program_length_minutes=average,
            content_kind_distribution=distribution,
        )
