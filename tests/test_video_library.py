"""Tests for VideoLibraryManager.

Verifies:
- add/remove/update semantics and single-channel membership
- deterministic search ordering
- keyword classification priority
- load() from sources, sync() of unseen assets, snapshot fallback
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from tempest.catalog import JsonAssetSource, JsonSnapshotStore, VideoLibraryManager
from tempest.infra.exceptions import SourceUnavailableError

from .conftest import make_asset


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeSource:
    """In-memory asset source returning a mutable record list."""

    def __init__(self, records=None, name="fake"):
        self.name = name
        self.records = list(records or [])
        self.available = True
        self.fetch_calls = 0

    def fetch_assets(self):
        self.fetch_calls += 1
        if not self.available:
            raise SourceUnavailableError(self.name, "connection refused")
        return list(self.records)


def _write_catalog(path, records):
    path.write_text(json.dumps({"assets": records}))
    return path


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------

class TestAddRemove:

    def test_add_assigns_channel(self, channels, clock):
        lib = VideoLibraryManager(channels, clock=clock)
        lib.add_asset(make_asset("a1", "Lecture"), "mindfeed")

        assert lib.get_asset("a1").title == "Lecture"
        assert [a.id for a in lib.get_channel_assets("mindfeed")] == ["a1"]
        assert lib.get_asset_channel("a1") == "mindfeed"

    def test_readding_same_pair_does_not_duplicate(self, channels, clock):
        lib = VideoLibraryManager(channels, clock=clock)
        asset = make_asset("a1", "Lecture")
        lib.add_asset(asset, "mindfeed")
        lib.add_asset(asset, "mindfeed")

        assert [a.id for a in lib.get_channel_assets("mindfeed")] == ["a1"]

    def test_reassignment_moves_asset(self, channels, clock):
        lib = VideoLibraryManager(channels, clock=clock)
        asset = make_asset("a1", "Lecture")
        lib.add_asset(asset, "mindfeed")
        lib.add_asset(asset, "how-to-hub")

        assert lib.get_channel_assets("mindfeed") == []
        assert [a.id for a in lib.get_channel_assets("how-to-hub")] == ["a1"]

    def test_unknown_channel_stores_asset_without_membership(self, channels, clock):
        lib = VideoLibraryManager(channels, clock=clock)
        lib.add_asset(make_asset("a1", "Lecture"), "no-such-channel")

        assert lib.get_asset("a1") is not None
        assert lib.get_asset_channel("a1") is None
        assert lib.get_channel_assets("no-such-channel") == []

    def test_remove_strips_channel_membership(self, library):
        assert library.remove_asset("lec-1") is True

        assert library.get_asset("lec-1") is None
        assert "lec-1" not in [a.id for a in library.get_channel_assets("mindfeed")]

    def test_remove_unknown_returns_false(self, library):
        assert library.remove_asset("missing") is False

    def test_update_asset(self, library):
        updated = library.update_asset("lec-1", title="Renamed Lecture", tags=["x"])

        assert updated.title == "Renamed Lecture"
        assert updated.tags == ("x",)
        assert library.get_asset("lec-1").title == "Renamed Lecture"
        assert library.update_asset("missing", title="nope") is None

    def test_channel_order_is_insertion_order(self, library):
        assert [a.id for a in library.get_channel_assets("mindfeed")] == ["lec-1", "lec-2", "doc-1"]

    def test_unknown_lookups_return_empty(self, library):
        assert library.get_asset("nope") is None
        assert library.get_channel_assets("nope") == []


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

class TestSearch:

    def test_search_is_case_insensitive_and_ordered_by_id(self, library):
        results = library.search_assets("LECTURE")
        assert [a.id for a in results] == ["lec-1"]

    def test_search_matches_tags(self, library):
        assert [a.id for a in library.search_assets("travel")] == ["trip-1"]

    def test_search_results_are_stable(self, library):
        first = [a.id for a in library.search_assets("e")]
        second = [a.id for a in library.search_assets("e")]
        assert first == second == sorted(first)

    def test_category_and_tags(self, library):
        assert [a.id for a in library.get_assets_by_category("DOCUMENTARY")] == ["doc-1"]
        assert [a.id for a in library.get_assets_by_tags(["relax"])] == ["calm-1"]

    def test_recent_assets_newest_first(self, channels, clock):
        lib = VideoLibraryManager(channels, clock=clock)
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(3):
            lib.add_asset(make_asset(f"a{i}", f"Video {i}", uploaded_at=base + timedelta(days=i)))
        lib.add_asset(make_asset("undated", "No date"))

        assert [a.id for a in lib.get_recent_assets(limit=3)] == ["a2", "a1", "a0"]
        assert lib.get_recent_assets(limit=10)[-1].id == "undated"


class TestClassification:

    def test_travel_wins_over_education(self, library):
        asset = make_asset("x", "Travel lecture series", description="education abroad")
        assert library.classify_channel(asset) == "retirewise"

    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Quantum Computing Lecture", "mindfeed"),
            ("Startup Career Advice", "career-compass"),
            ("Stress Relief Meditation", "wellness-wave"),
            ("DIY Bookshelf", "how-to-hub"),
            ("Homecoming Game Recap", "campus-pulse"),
        ],
    )
    def test_priority_order(self, library, title, expected):
        assert library.classify_channel(make_asset("x", title)) == expected


# ---------------------------------------------------------------------------
# Loading and sync
# ---------------------------------------------------------------------------

class TestLoadAndSync:

    def test_load_respects_record_channel(self, channels, clock):
        source = FakeSource([
            {"id": "v1", "title": "Anything", "duration": 600, "channel_id": "quizquest"},
            {"id": "v2", "title": "Travel vlog", "duration": 600},
        ])
        lib = VideoLibraryManager(channels, sources=[source], clock=clock)
        lib.load()

        assert lib.get_asset_channel("v1") == "quizquest"
        assert lib.get_asset_channel("v2") == "retirewise"
        assert lib.last_sync == clock.now_utc()

    def test_load_skips_malformed_records(self, channels, clock):
        source = FakeSource([
            {"id": "ok", "title": "Fine", "duration": 600},
            {"id": "bad", "title": "Broken", "duration": "not-a-number"},
            {"title": "No id"},
        ])
        lib = VideoLibraryManager(channels, sources=[source], clock=clock)
        lib.load()

        assert [a.id for a in lib.get_all_assets()] == ["ok"]

    def test_sync_adds_only_unseen_assets(self, channels, clock):
        source = FakeSource([{"id": "v1", "title": "Lecture one", "duration": 600}])
        lib = VideoLibraryManager(channels, sources=[source], clock=clock)
        lib.load()
        lib.update_asset("v1", title="Edited locally")

        source.records.append({"id": "v2", "title": "Career talk", "duration": 900})
        source.records[0] = {"id": "v1", "title": "Lecture one (remote)", "duration": 600}
        clock.advance(minutes=10)
        report = lib.sync(source)

        assert report.added == ["v2"]
        assert report.skipped == ["v1"]
        assert lib.get_asset("v1").title == "Edited locally"
        assert lib.get_asset_channel("v2") == "career-compass"
        assert lib.last_sync == clock.now_utc()

    def test_sync_failure_leaves_catalog_untouched(self, library):
        source = FakeSource(name="down")
        source.available = False
        before = [a.id for a in library.get_all_assets()]

        with pytest.raises(SourceUnavailableError):
            library.sync(source)

        assert [a.id for a in library.get_all_assets()] == before

    def test_force_sync_continues_past_unavailable_source(self, channels, clock):
        down = FakeSource(name="down")
        down.available = False
        up = FakeSource([{"id": "v1", "title": "Hello", "duration": 60}], name="up")
        lib = VideoLibraryManager(channels, sources=[down, up], clock=clock)

        reports = lib.force_sync()

        assert [r.source for r in reports] == ["down", "up"]
        assert reports[0].failed
        assert lib.get_asset("v1") is not None

    def test_should_sync_after_interval(self, channels, clock):
        lib = VideoLibraryManager(channels, sources=[FakeSource()], clock=clock)
        assert lib.should_sync() is True
        lib.load()
        assert lib.should_sync() is False
        clock.advance(minutes=5, seconds=1)
        assert lib.should_sync() is True

    def test_json_source_load(self, channels, clock, tmp_path):
        path = _write_catalog(tmp_path / "catalog.json", [
            {"id": "j1", "title": "Campus News", "duration_seconds": 300},
        ])
        lib = VideoLibraryManager(channels, sources=[JsonAssetSource(path)], clock=clock)
        lib.load()

        assert lib.get_asset_channel("j1") == "campus-pulse"


class TestSnapshotFallback:

    def test_snapshot_written_and_restored(self, channels, clock, tmp_path):
        store = JsonSnapshotStore(tmp_path / "snapshot.json")
        source = FakeSource([
            {"id": "v1", "title": "Lecture", "duration": 600},
            {"id": "v2", "title": "Tutorial", "duration": 600, "channel_id": "how-to-hub"},
        ])
        first = VideoLibraryManager(channels, sources=[source], snapshot_store=store, clock=clock)
        first.load()
        assert store.path.is_file()

        source.available = False
        second = VideoLibraryManager(channels, sources=[source], snapshot_store=store, clock=clock)
        second.load()

        assert {a.id for a in second.get_all_assets()} == {"v1", "v2"}
        assert second.get_asset_channel("v1") == "mindfeed"
        assert second.get_asset_channel("v2") == "how-to-hub"
        assert second.last_sync == first.last_sync

    def test_no_source_and_no_snapshot_leaves_catalog_empty(self, channels, clock, tmp_path):
        source = FakeSource()
        source.available = False
        lib = VideoLibraryManager(
            channels,
            sources=[source],
            snapshot_store=JsonSnapshotStore(tmp_path / "missing.json"),
            clock=clock,
        )
        lib.load()

        assert lib.get_all_assets() == []

    def test_corrupt_snapshot_is_ignored(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text("{not json")
        assert JsonSnapshotStore(path).load() is None

    def test_clear_removes_snapshot(self, channels, clock, tmp_path):
        store = JsonSnapshotStore(tmp_path / "snapshot.json")
        lib = VideoLibraryManager(channels, snapshot_store=store, clock=clock)
        lib.add_asset(make_asset("a1", "Lecture"), "mindfeed")
        assert store.path.is_file()

        lib.clear()

        assert lib.get_all_assets() == []
        assert not store.path.exists()


class TestStats:

    def test_library_stats(self, library):
        stats = library.get_library_stats()

        assert stats["total_assets"] == 6
        assert stats["total_duration_seconds"] == 2400 + 1500 + 5400 + 3600 + 1200 + 900
        assert stats["channel_stats"]["MindFeed"] == 3
        assert stats["channel_stats"]["QuizQuest"] == 0

    def test_sync_status(self, library):
        status = library.get_sync_status()
        assert status["asset_count"] == 6
        assert status["should_sync"] is True
        assert status["channel_counts"]["mindfeed"] == 3
