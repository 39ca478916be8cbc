"""
Core value types for the catalog and the scheduling engine.

VideoAsset is owned by the catalog; ScheduleItem is owned by the engine and
is always regenerated, never loaded from durable storage.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from ..infra.exceptions import AssetRecordError


class ContentKind(str, Enum):
    """Presentation label for a scheduled slot."""

    LIVE = "live"
    VOD = "vod"
    PREMIERE = "premiere"
    RERUN = "rerun"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO string or datetime into an aware UTC datetime.

    Naive values are interpreted as UTC (SQLite drops offsets).
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise TypeError(f"unsupported timestamp value: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class VideoAsset:
    """A video in the catalog, hosted by the external streaming provider."""

    id: str
    title: str
    description: str = ""
    source_reference: str = ""
    thumbnail_path: str = ""
    duration_seconds: int = 0  # 0 means unspecified
    category: str = "general"
    tags: tuple[str, ...] = ()
    uploaded_at: datetime | None = None
    last_synced_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def searchable_text(self) -> str:
        """Lowercased title, description and tags joined by spaces."""
        return " ".join([self.title, self.description, *self.tags]).lower()

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> VideoAsset:
        """Build an asset from an asset-source record.

        Understands both the platform content-table shape (``cloudflare_video_id``,
        ``thumbnail_url``, ``duration``, ``created_at``) and the shape produced
        by :meth:`to_dict`.

        Raises:
            AssetRecordError: if the record is missing its id/title or carries
                an unusable duration, tag list or timestamp.
        """
        asset_id = record.get("id")
        if not asset_id:
            raise AssetRecordError("asset record has no id")
        asset_id = str(asset_id)
        title = record.get("title")
        if not title:
            raise AssetRecordError("asset record has no title", record_id=asset_id)

        raw_duration = record.get("duration_seconds", record.get("duration")) or 0
        try:
            duration = int(raw_duration)
        except (TypeError, ValueError):
            raise AssetRecordError(
                f"invalid duration {raw_duration!r}", record_id=asset_id
            ) from None
        if duration < 0:
            raise AssetRecordError(f"negative duration {duration}", record_id=asset_id)

        tags = record.get("tags") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]
        if not isinstance(tags, (list, tuple, set, frozenset)):
            raise AssetRecordError(f"invalid tags {tags!r}", record_id=asset_id)

        try:
            uploaded_at = parse_timestamp(record.get("uploaded_at", record.get("created_at")))
            last_synced_at = parse_timestamp(
                record.get("last_synced_at", record.get("last_synced"))
            )
        except (TypeError, ValueError) as exc:
            raise AssetRecordError(f"invalid timestamp: {exc}", record_id=asset_id) from None

        return cls(
            id=asset_id,
            title=str(title),
            description=str(record.get("description") or ""),
            source_reference=str(
                record.get("source_reference") or record.get("cloudflare_video_id") or ""
            ),
            thumbnail_path=str(record.get("thumbnail_path") or record.get("thumbnail_url") or ""),
            duration_seconds=duration,
            category=str(record.get("category") or "general"),
            tags=tuple(str(t) for t in tags),
            uploaded_at=uploaded_at,
            last_synced_at=last_synced_at,
            metadata=dict(record.get("metadata") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "source_reference": self.source_reference,
            "thumbnail_path": self.thumbnail_path,
            "duration_seconds": self.duration_seconds,
            "category": self.category,
            "tags": list(self.tags),
            "uploaded_at": _format_timestamp(self.uploaded_at),
            "last_synced_at": _format_timestamp(self.last_synced_at),
            "metadata": dict(self.metadata),
        }

    def with_changes(self, **changes: Any) -> VideoAsset:
        if "id" in changes and changes["id"] != self.id:
            raise ValueError("asset id cannot be changed")
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"])
        return replace(self, **changes)


def make_item_id(channel_id: str, start_time: datetime, asset_id: str | None, kind: str = "") -> str:
    """Deterministic schedule item id: channel, start (epoch ms), asset."""
    start_ms = int(start_time.timestamp() * 1000)
    parts = [channel_id]
    if kind:
        parts.append(kind)
    parts.append(str(start_ms))
    if asset_id:
        parts.append(asset_id)
    return "-".join(parts)


@dataclass(frozen=True)
class ScheduleItem:
    """One occupancy of ``[start_time, end_time)`` on a channel."""

    id: str
    channel_id: str
    title: str
    start_time: datetime
    end_time: datetime
    content_kind: ContentKind = ContentKind.VOD
    asset_id: str | None = None
    description: str = ""
    thumbnail: str = ""
    is_live: bool = False
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Items are shared between snapshots; metadata must not be writable.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if self.end_time <= self.start_time:
            raise ValueError(
                f"schedule item {self.id} ends at or before it starts "
                f"({self.start_time.isoformat()} >= {self.end_time.isoformat()})"
            )

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def is_placeholder(self) -> bool:
        return bool(self.metadata.get("isPlaceholder"))

    def contains(self, moment: datetime) -> bool:
        """Half-open containment: start inclusive, end exclusive."""
        return self.start_time <= moment < self.end_time

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start_time < end and self.end_time > start

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "channel_id": self.channel_id,
            "asset_id": self.asset_id,
            "title": self.title,
            "description": self.description,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "content_kind": self.content_kind.value,
            "thumbnail": self.thumbnail,
            "is_live": self.is_live,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a mutating schedule operation."""

    ok: bool
    item: ScheduleItem | None = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, item: ScheduleItem | None = None) -> OperationResult:
        return cls(ok=True, item=item)

    @classmethod
    def failure(cls, error: str) -> OperationResult:
        return cls(ok=False, error=error)


@dataclass(frozen=True)
class GuideData:
    """Program guide window: slot boundaries, channels and overlapping programs."""

    start: datetime
    end: datetime
    time_slots: list[datetime]
    channels: list[Any]
    programs_by_channel: dict[str, list[ScheduleItem]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start.isoformat(),
            "end_time": self.end.isoformat(),
            "time_slots": [slot.isoformat() for slot in self.time_slots],
            "channels": [c.to_dict() for c in self.channels],
            "programs": {
                channel_id: [item.to_dict() for item in items]
                for channel_id, items in self.programs_by_channel.items()
            },
        }


@dataclass(frozen=True)
class ScheduleStats:
    total_programs: int
    per_channel_counts: dict[str, int]
    average_program_length_minutes: float
    content_kind_distribution: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_programs": self.total_programs,
            "per_channel_counts": dict(self.per_channel_counts),
            "average_program_length_minutes": self.average_program_length_minutes,
            "content_kind_distribution": dict(self.content_kind_distribution),
        }


@dataclass
class SyncReport:
    """What a catalog sync did with the records it fetched."""

    source: str
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "added": len(self.added),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }
