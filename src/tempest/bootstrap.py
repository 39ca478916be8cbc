"""
Composition root: builds the catalog, engine, guide and refresher from settings.

Nothing below this module reads global settings; everything is passed in
here, so tests can assemble isolated object graphs directly.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import timedelta

from .catalog.asset_sources import AssetSource, DatabaseAssetSource, JsonAssetSource
from .catalog.snapshot_store import JsonSnapshotStore
from .catalog.video_library import VideoLibraryManager
from .epg.service import EpgService
from .infra.db import get_sessionmaker
from .infra.settings import Settings, settings as default_settings
from .runtime.clock import MasterClock, SystemMasterClock
from .runtime.config import ChannelConfigProvider
from .runtime.providers import StaticChannelConfigProvider, YamlChannelConfigProvider
from .scheduling.engine import SchedulingEngine
from .scheduling.refresher import ScheduleRefresher


@dataclass
class Services:
    channels: ChannelConfigProvider
    library: VideoLibraryManager
    engine: SchedulingEngine
    epg: EpgService
    refresher: ScheduleRefresher


def build_channel_provider(channels_path: str | None) -> ChannelConfigProvider:
    if channels_path:
        return YamlChannelConfigProvider(channels_path)
    return StaticChannelConfigProvider()


def build_asset_sources(catalog_path: str | None, database_url: str | None = None) -> list[AssetSource]:
    """A JSON catalog file when configured, otherwise the platform database."""
    if catalog_path:
        return [JsonAssetSource(catalog_path)]
    return [DatabaseAssetSource(get_sessionmaker(database_url))]


def build_services(
    config: Settings | None = None,
    *,
    clock: MasterClock | None = None,
    catalog_path: str | None = None,
    channels_path: str | None = None,
    snapshot_path: str | None = None,
    seed: int | None = None,
    load: bool = True,
) -> Services:
    """Wire up every collaborator. Keyword arguments override settings.

    With ``load`` the catalog is populated and schedules generated before
    returning; the refresher is created but not started.
    """
    config = config or default_settings
    clock = clock or SystemMasterClock()
    seed = seed if seed is not None else config.scheduler_seed
    snapshot_path = snapshot_path or config.snapshot_path

    channels = build_channel_provider(channels_path or config.channels_config_path)
    library = VideoLibraryManager(
        channels,
        sources=build_asset_sources(catalog_path or config.asset_catalog_path, config.database_url),
        snapshot_store=JsonSnapshotStore(snapshot_path) if snapshot_path else None,
        clock=clock,
        sync_interval_seconds=config.catalog_sync_interval_seconds,
    )
    engine = SchedulingEngine(
        library,
        channels,
        clock=clock,
        rng=random.Random(seed),
        tz=config.timezone,
        window=timedelta(days=config.schedule_window_days),
        placeholder_window=timedelta(days=config.placeholder_window_days),
        guide_hours_to_show=config.guide_hours_to_show,
        guide_minutes_per_slot=config.guide_minutes_per_slot,
    )
    refresher = ScheduleRefresher(
        engine,
        clock,
        library=library,
        refresh_interval_seconds=config.refresh_interval_seconds,
        regeneration_interval_seconds=config.regeneration_interval_seconds,
    )

    if load:
        library.load()
        engine.regenerate()

    return Services(
        channels=channels,
        library=library,
        engine=engine,
        epg=EpgService(engine, channels),
        refresher=refresher,
    )
