"""
VideoLibraryManager — in-process index of schedulable video assets.

Maps asset id -> VideoAsset and channel id -> ordered list of asset ids.
Populated from external asset sources, with an optional snapshot store used
as a cold-start fallback when every source is unavailable.

Usage:
    from tempest.catalog import VideoLibraryManager, DatabaseAssetSource
    library = VideoLibraryManager(channels, sources=[DatabaseAssetSource()])
    library.load()
    library.get_channel_assets("mindfeed")
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Generator, Iterable, Sequence
from datetime import datetime, timedelta
from typing import Any

from ..infra.exceptions import AssetRecordError, SourceUnavailableError
from ..infra.logging import get_logger
from ..runtime.clock import MasterClock, SystemMasterClock
from ..runtime.config import ChannelConfigProvider
from ..runtime.constants import (
    CATALOG_SYNC_INTERVAL_SECONDS,
    CHANNEL_KEYWORD_PRIORITY,
    DEFAULT_CHANNEL_ID,
)
from ..runtime.schedule_types import SyncReport, VideoAsset
from .asset_sources import AssetSource
from .classifier import classify_channel
from .snapshot_store import CatalogSnapshot, SnapshotStore

logger = get_logger(__name__)


class VideoLibraryManager:
    """Authoritative in-process catalog of video assets.

    An asset belongs to at most one channel; assigning it to a new channel
    removes it from the previous one. Lookups on unknown ids return None.
    """

    def __init__(
        self,
        channels: ChannelConfigProvider,
        sources: Sequence[AssetSource] = (),
        snapshot_store: SnapshotStore | None = None,
        clock: MasterClock | None = None,
        keyword_rules: Sequence[tuple[str, Sequence[str]]] = CHANNEL_KEYWORD_PRIORITY,
        default_channel_id: str = DEFAULT_CHANNEL_ID,
        sync_interval_seconds: int = CATALOG_SYNC_INTERVAL_SECONDS,
    ) -> None:
        self._channels = channels
        self._sources = list(sources)
        self._snapshot_store = snapshot_store
        self._clock = clock or SystemMasterClock()
        self._keyword_rules = tuple(keyword_rules)
        self._default_channel_id = default_channel_id
        self._sync_interval = timedelta(seconds=sync_interval_seconds)

        self._lock = threading.RLock()
        self._assets: dict[str, VideoAsset] = {}
        self._channel_assets: dict[str, list[str]] = {}
        self._asset_channel: dict[str, str] = {}
        self._last_sync: datetime | None = None
        self._persist_suspended = 0

        self._init_channels()

    def _init_channels(self) -> None:
        self._channel_assets = {c.channel_id: [] for c in self._channels.list_channels()}
        self._asset_channel = {}

    @property
    def last_sync(self) -> datetime | None:
        return self._last_sync

    @property
    def sources(self) -> list[AssetSource]:
        return list(self._sources)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_asset(self, asset: VideoAsset, channel_id: str | None = None) -> None:
        """Upsert ``asset``; assign it to ``channel_id`` when that channel exists.

        Re-adding the same asset/channel pair does not duplicate membership.
        Without a channel the asset keeps whatever assignment it had.
        """
        with self._lock:
            self._assets[asset.id] = asset
            if channel_id is not None:
                if channel_id in self._channel_assets:
                    self._assign(asset.id, channel_id)
                else:
                    logger.warning(
                        "catalog.unknown_channel", asset_id=asset.id, channel_id=channel_id
                    )
            self._persist()

    def _assign(self, asset_id: str, channel_id: str) -> None:
        previous = self._asset_channel.get(asset_id)
        if previous == channel_id:
            return
        if previous is not None:
            self._channel_assets[previous] = [
                i for i in self._channel_assets[previous] if i != asset_id
            ]
        self._channel_assets[channel_id].append(asset_id)
        self._asset_channel[asset_id] = channel_id

    def remove_asset(self, asset_id: str) -> bool:
        """Delete the asset and strip it from every channel. False if unknown."""
        with self._lock:
            if asset_id not in self._assets:
                return False
            del self._assets[asset_id]
            for channel_id, ids in self._channel_assets.items():
                if asset_id in ids:
                    self._channel_assets[channel_id] = [i for i in ids if i != asset_id]
            self._asset_channel.pop(asset_id, None)
            self._persist()
            return True

    def update_asset(self, asset_id: str, **changes: Any) -> VideoAsset | None:
        """Apply field changes to an existing asset; None if the id is unknown."""
        with self._lock:
            current = self._assets.get(asset_id)
            if current is None:
                return None
            updated = current.with_changes(**changes)
            self._assets[asset_id] = updated
            self._persist()
            return updated

    def clear(self) -> None:
        """Drop every asset and the stored snapshot."""
        with self._lock:
            self._assets.clear()
            self._init_channels()
            if self._snapshot_store is not None:
                self._snapshot_store.clear()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_asset(self, asset_id: str) -> VideoAsset | None:
        return self._assets.get(asset_id)

    def get_asset_channel(self, asset_id: str) -> str | None:
        return self._asset_channel.get(asset_id)

    def get_all_assets(self) -> list[VideoAsset]:
        with self._lock:
            return list(self._assets.values())

    def get_channel_assets(self, channel_id: str) -> list[VideoAsset]:
        """Assets assigned to the channel, in insertion order."""
        with self._lock:
            ids = self._channel_assets.get(channel_id, [])
            return [self._assets[i] for i in ids if i in self._assets]

    def search_assets(self, query: str) -> list[VideoAsset]:
        """Case-insensitive substring search over title, description, tags and category.

        Results are ordered by asset id.
        """
        needle = query.lower()
        with self._lock:
            matches = [
                asset
                for asset in self._assets.values()
                if needle in asset.title.lower()
                or needle in asset.description.lower()
                or any(needle in tag.lower() for tag in asset.tags)
                or needle in asset.category.lower()
            ]
        return sorted(matches, key=lambda a: a.id)

    def get_assets_by_category(self, category: str) -> list[VideoAsset]:
        wanted = category.lower()
        return [a for a in self.get_all_assets() if a.category.lower() == wanted]

    def get_assets_by_tags(self, tags: Iterable[str]) -> list[VideoAsset]:
        wanted = [t.lower() for t in tags]
        return [
            a
            for a in self.get_all_assets()
            if any(w in tag.lower() for w in wanted for tag in a.tags)
        ]

    def get_recent_assets(self, limit: int = 10) -> list[VideoAsset]:
        """Most recently uploaded assets first; assets without a date sort last."""
        assets = self.get_all_assets()
        dated = sorted(
            (a for a in assets if a.uploaded_at is not None),
            key=lambda a: (a.uploaded_at, a.id),
            reverse=True,
        )
        undated = sorted((a for a in assets if a.uploaded_at is None), key=lambda a: a.id)
        return (dated + undated)[: max(limit, 0)]

    def classify_channel(self, asset: VideoAsset) -> str:
        return classify_channel(asset, self._keyword_rules, self._default_channel_id)

    # ------------------------------------------------------------------
    # Loading and sync
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Initial population from every configured source.

        Records carrying a known ``channel_id`` are assigned there; the rest
        are classified. When no source can be read, the snapshot store (if
        any) is used instead.
        """
        loaded_any = False
        with self._batched():
            for source in self._sources:
                try:
                    records = source.fetch_assets()
                except SourceUnavailableError as exc:
                    logger.error("catalog.load_failed", source=source.name, reason=exc.reason)
                    continue
                report = self._ingest(source.name, records, upsert=True)
                loaded_any = True
                logger.info("catalog.loaded", **report.to_dict())

            if loaded_any:
                self._last_sync = self._clock.now_utc()
            else:
                self._restore_snapshot()

    def sync(self, source: AssetSource) -> SyncReport:
        """Add every asset from ``source`` that is not already in the catalog.

        New assets are classified into a channel. Malformed records are
        skipped and reported; the catalog keeps whatever was added before a
        failure.

        Raises:
            SourceUnavailableError: if the source cannot be read at all. The
                catalog is left untouched.
        """
        try:
            records = source.fetch_assets()
        except SourceUnavailableError as exc:
            logger.error("catalog.sync_failed", source=source.name, reason=exc.reason)
            raise

        with self._batched():
            report = self._ingest(source.name, records, upsert=False)
            self._last_sync = self._clock.now_utc()
        logger.info("catalog.synced", **report.to_dict())
        return report

    def force_sync(self) -> list[SyncReport]:
        """Sync with every configured source, continuing past unavailable ones."""
        reports = []
        for source in self._sources:
            try:
                reports.append(self.sync(source))
            except SourceUnavailableError:
                reports.append(SyncReport(source=source.name, failed=["<source unavailable>"]))
        return reports

    def should_sync(self) -> bool:
        if self._last_sync is None:
            return True
        return self._clock.now_utc() - self._last_sync > self._sync_interval

    def _ingest(self, source_name: str, records: Iterable[dict[str, Any]], upsert: bool) -> SyncReport:
        report = SyncReport(source=source_name)
        for record in records:
            try:
                asset = VideoAsset.from_record(record)
            except AssetRecordError as exc:
                logger.warning(
                    "catalog.record_skipped", source=source_name, record_id=exc.record_id, reason=str(exc)
                )
                report.failed.append(exc.record_id or "<unknown>")
                continue

            if asset.id in self._assets and not upsert:
                report.skipped.append(asset.id)
                continue

            channel_id = record.get("channel_id")
            if channel_id not in self._channel_assets:
                channel_id = self._asset_channel.get(asset.id) or self.classify_channel(asset)
            self.add_asset(asset, channel_id)
            report.added.append(asset.id)
        return report

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_library_stats(self) -> dict[str, Any]:
        with self._lock:
            channel_stats = {
                c.name: len(self._channel_assets.get(c.channel_id, []))
                for c in self._channels.list_channels()
            }
            return {
                "total_assets": len(self._assets),
                "total_duration_seconds": sum(a.duration_seconds for a in self._assets.values()),
                "channel_stats": channel_stats,
                "last_sync": self._last_sync,
            }

    def get_sync_status(self) -> dict[str, Any]:
        with self._lock:
            return {
                "last_sync": self._last_sync,
                "should_sync": self.should_sync(),
                "asset_count": len(self._assets),
                "channel_counts": {k: len(v) for k, v in self._channel_assets.items()},
            }

    # ------------------------------------------------------------------
    # Snapshot persistence
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def _batched(self) -> Generator[None, None, None]:
        """Hold the lock and write one snapshot at the end instead of per change."""
        with self._lock:
            self._persist_suspended += 1
            try:
                yield
            finally:
                self._persist_suspended -= 1
            self._persist()

    def _persist(self) -> None:
        if self._snapshot_store is None or self._persist_suspended:
            return
        snapshot = CatalogSnapshot(
            assets=[a.to_dict() for a in self._assets.values()],
            channel_assets={k: list(v) for k, v in self._channel_assets.items()},
            last_sync=self._last_sync,
        )
        try:
            self._snapshot_store.save(snapshot)
        except OSError as exc:
            logger.warning("catalog.snapshot_save_failed", error=str(exc))

    def _restore_snapshot(self) -> None:
        if self._snapshot_store is None:
            logger.warning("catalog.no_sources_available")
            return
        snapshot = self._snapshot_store.load()
        if snapshot is None:
            logger.warning("catalog.no_snapshot")
            return

        restored: dict[str, VideoAsset] = {}
        for record in snapshot.assets:
            try:
                asset = VideoAsset.from_record(record)
            except AssetRecordError as exc:
                logger.warning("catalog.snapshot_record_skipped", record_id=exc.record_id, reason=str(exc))
                continue
            restored[asset.id] = asset
            self.add_asset(asset)

        # Replay memberships channel by channel to keep their stored order.
        for channel_id, ids in snapshot.channel_assets.items():
            if channel_id not in self._channel_assets:
                continue
            for asset_id in ids:
                if asset_id in restored:
                    self._assign(asset_id, channel_id)

        self._last_sync = snapshot.last_sync
        logger.info("catalog.restored_from_snapshot", assets=len(restored))
