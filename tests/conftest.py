"""
Global test configuration for Tempest.

Fixtures build isolated object graphs: a controllable clock pinned to
2024-01-01T00:00Z, a seeded RNG, the eight built-in channels, a catalog of
representative assets and an engine over them.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tempest.catalog import VideoLibraryManager
from tempest.domain.entities import ContentRecord  # noqa: F401  (registers the table)
from tempest.infra.db import Base
from tempest.runtime.clock import ControllableMasterClock
from tempest.runtime.providers import StaticChannelConfigProvider
from tempest.runtime.schedule_types import VideoAsset
from tempest.scheduling import SchedulingEngine

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_asset(asset_id: str, title: str, duration: int = 1800, **kwargs) -> VideoAsset:
    """Create a VideoAsset with sensible defaults."""
    return VideoAsset(id=asset_id, title=title, duration_seconds=duration, **kwargs)


SAMPLE_ASSETS = [
    # (asset, channel)
    (make_asset("lec-1", "Intro Lecture: Algorithms", 2400, tags=("education",)), "mindfeed"),
    (make_asset("lec-2", "Calculus Tutorial", 1500, tags=("learning",)), "mindfeed"),
    (make_asset("doc-1", "Deep Ocean Documentary", 5400, category="documentary"), "mindfeed"),
    (make_asset("trip-1", "City Guide: Lisbon", 3600, tags=("travel",)), "retirewise"),
    (make_asset("job-1", "Career Fair Highlights", 1200), "career-compass"),
    (make_asset("calm-1", "Peaceful Nature Sounds", 900, tags=("relaxing",)), "wellness-wave"),
]


@pytest.fixture
def clock() -> ControllableMasterClock:
    return ControllableMasterClock(epoch=EPOCH)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def channels() -> StaticChannelConfigProvider:
    return StaticChannelConfigProvider()


@pytest.fixture
def library(channels, clock) -> VideoLibraryManager:
    lib = VideoLibraryManager(channels, clock=clock)
    for asset, channel_id in SAMPLE_ASSETS:
        lib.add_asset(asset, channel_id)
    return lib


@pytest.fixture
def engine(library, channels, clock, rng) -> SchedulingEngine:
    return SchedulingEngine(library, channels, clock=clock, rng=rng, tz="UTC")


@pytest.fixture
def session_factory():
    """In-memory SQLite database with the content table created."""
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(db_engine)
    factory = sessionmaker(bind=db_engine, autoflush=False, autocommit=False, future=True)
    yield factory
    db_engine.dispose()
