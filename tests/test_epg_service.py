"""Tests for the EPG query surface."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from tempest.epg import EpgService
from tempest.infra.exceptions import InvalidInputError

from .conftest import EPOCH


@pytest.fixture
def epg(engine, channels) -> EpgService:
    engine.regenerate()
    return EpgService(engine, channels)


class TestValidation:

    def test_naive_range_rejected(self, epg):
        with pytest.raises(InvalidInputError):
            epg.channel_schedule("mindfeed", datetime(2024, 1, 1, 10), None)

    def test_inverted_range_rejected(self, epg):
        with pytest.raises(InvalidInputError):
            epg.all_channels_schedule(EPOCH + timedelta(hours=2), EPOCH)

    @pytest.mark.parametrize("hours", [0, -3, 24 * 7 + 1])
    def test_guide_hours_bounds(self, epg, hours):
        with pytest.raises(InvalidInputError):
            epg.guide(hours=hours)

    @pytest.mark.parametrize("offset", [-1, 7])
    def test_day_offset_bounds(self, epg, offset):
        with pytest.raises(InvalidInputError):
            epg.day_schedule("mindfeed", offset)

    def test_invalid_input_is_a_value_error(self):
        assert issubclass(InvalidInputError, ValueError)


class TestQueries:

    def test_day_schedule_offsets(self, epg):
        tomorrow = epg.day_schedule("mindfeed", 1)
        assert tomorrow
        assert {i.start_time.date() for i in tomorrow} == {date(2024, 1, 2)}

    def test_current_and_next_programs_skip_empty(self, epg, engine, clock):
        clock.set(EPOCH + timedelta(days=2))
        engine.refresh_current_programs()

        current = epg.current_programs()
        # Placeholder channels only cover the first day.
        assert "quizquest" not in current
        assert "mindfeed" in current
        assert "quizquest" not in epg.next_programs()

    def test_guide_with_explicit_start(self, epg):
        start = datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc)
        guide = epg.guide(start, hours=2)
        assert guide.start == start
        assert len(guide.time_slots) == 4
        assert len(guide.to_dict()["channels"]) == 8

    def test_blank_search_returns_nothing(self, epg):
        assert epg.search("   ") == []

    def test_stats_passthrough(self, epg, engine):
        assert epg.stats() == engine.get_schedule_stats()

    def test_channel_lookup(self, epg):
        assert [c.channel_id for c in epg.list_channels()][0] == "campus-pulse"
        assert epg.get_channel("mindfeed").name == "MindFeed"
        assert epg.get_channel("nowhere") is None
