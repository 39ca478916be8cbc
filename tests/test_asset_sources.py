"""Tests for the database and JSON asset sources."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from tempest.catalog import DatabaseAssetSource, JsonAssetSource, VideoLibraryManager
from tempest.domain.entities import ContentRecord
from tempest.infra.exceptions import SourceUnavailableError
from tempest.infra.uow import session


def _row(row_id, title, published=True, day=1, **kwargs):
    return ContentRecord(
        id=row_id,
        title=title,
        cloudflare_video_id=f"cf-{row_id}",
        duration=kwargs.pop("duration", 1800),
        is_published=published,
        created_at=datetime(2024, 1, day, tzinfo=timezone.utc),
        **kwargs,
    )


class TestDatabaseAssetSource:

    def test_reads_published_rows_newest_first(self, session_factory):
        with session(session_factory) as db:
            db.add_all([
                _row("c1", "Older", day=1, tags=["travel"]),
                _row("c2", "Newer", day=3, channel_id="mindfeed"),
                _row("c3", "Draft", published=False, day=2),
            ])

        records = DatabaseAssetSource(session_factory).fetch_assets()

        assert [r["id"] for r in records] == ["c2", "c1"]
        assert records[1]["tags"] == ["travel"]
        assert records[0]["cloudflare_video_id"] == "cf-c2"

    def test_include_unpublished(self, session_factory):
        with session(session_factory) as db:
            db.add_all([_row("c1", "Live"), _row("c2", "Draft", published=False)])

        records = DatabaseAssetSource(session_factory, include_unpublished=True).fetch_assets()
        assert {r["id"] for r in records} == {"c1", "c2"}

    def test_records_load_into_catalog(self, session_factory, channels, clock):
        with session(session_factory) as db:
            db.add_all([
                _row("c1", "Campus Tour", channel_id="retirewise", metadata_={"views": 3}),
                _row("c2", "Stress Less", description="meditation basics"),
            ])

        lib = VideoLibraryManager(channels, sources=[DatabaseAssetSource(session_factory)], clock=clock)
        lib.load()

        tour = lib.get_asset("c1")
        assert tour.source_reference == "cf-c1"
        assert tour.metadata == {"views": 3}
        assert tour.uploaded_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert lib.get_asset_channel("c1") == "retirewise"
        assert lib.get_asset_channel("c2") == "wellness-wave"

    def test_database_errors_become_source_unavailable(self):
        def broken_factory():
            raise OperationalError("SELECT 1", {}, Exception("no such table: content"))

        with pytest.raises(SourceUnavailableError) as exc_info:
            DatabaseAssetSource(broken_factory).fetch_assets()
        assert exc_info.value.source == "database"


class TestJsonAssetSource:

    def test_accepts_plain_list(self, tmp_path):
        path = tmp_path / "assets.json"
        path.write_text(json.dumps([{"id": "a", "title": "A"}, "junk"]))
        source = JsonAssetSource(path)

        assert source.name == "json:assets.json"
        assert source.fetch_assets() == [{"id": "a", "title": "A"}]

    def test_accepts_assets_key(self, tmp_path):
        path = tmp_path / "assets.json"
        path.write_text(json.dumps({"assets": [{"id": "a", "title": "A"}]}))
        assert len(JsonAssetSource(path).fetch_assets()) == 1

    @pytest.mark.parametrize("content", [None, "{broken", '{"assets": 5}'])
    def test_unreadable_catalog(self, tmp_path, content):
        path = tmp_path / "assets.json"
        if content is not None:
            path.write_text(content)
        with pytest.raises(SourceUnavailableError):
            JsonAssetSource(path).fetch_assets()
