"""Tests for time-of-day slot rules and content-kind labelling."""

from __future__ import annotations

import random

import pytest

from tempest.runtime.schedule_types import ContentKind
from tempest.scheduling.slot_rules import (
    classify_content_kind,
    is_suitable_for_hour,
    select_asset_for_slot,
)

from .conftest import make_asset


SHORT_LECTURE = make_asset("short-lec", "Short Lecture", 40 * 60)
LONG_LECTURE = make_asset("long-lec", "Long Lecture", 50 * 60)
SHORT_CLIP = make_asset("clip", "Funny Clip", 10 * 60)
FEATURE = make_asset("feature", "Feature Film", 100 * 60)
AMBIENT = make_asset("ambient", "Ambient Rain", 20 * 60)


class TestSuitability:

    @pytest.mark.parametrize("hour", [6, 9, 11])
    def test_morning_wants_short_educational(self, hour):
        assert is_suitable_for_hour(SHORT_LECTURE, hour)
        assert not is_suitable_for_hour(LONG_LECTURE, hour)
        assert not is_suitable_for_hour(SHORT_CLIP, hour)

    @pytest.mark.parametrize("hour", [12, 15, 17])
    def test_afternoon_caps_at_ninety_minutes(self, hour):
        assert is_suitable_for_hour(SHORT_CLIP, hour)
        assert is_suitable_for_hour(make_asset("x", "x", 90 * 60), hour)
        assert not is_suitable_for_hour(FEATURE, hour)

    @pytest.mark.parametrize("hour", [18, 21])
    def test_evening_needs_thirty_minutes(self, hour):
        assert is_suitable_for_hour(make_asset("x", "x", 30 * 60), hour)
        assert not is_suitable_for_hour(SHORT_CLIP, hour)

    @pytest.mark.parametrize("hour", [22, 0, 3, 5])
    def test_late_night_relaxing_or_long(self, hour):
        assert is_suitable_for_hour(AMBIENT, hour)
        assert is_suitable_for_hour(FEATURE, hour)
        assert not is_suitable_for_hour(SHORT_CLIP, hour)


class TestSelection:

    def test_picks_only_suitable_assets(self):
        rng = random.Random(7)
        pool = [SHORT_LECTURE, SHORT_CLIP, FEATURE]
        picks = {select_asset_for_slot(pool, 9, rng).id for _ in range(50)}
        assert picks == {"short-lec"}

    def test_falls_back_to_all_assets(self):
        rng = random.Random(7)
        pool = [SHORT_CLIP]
        assert select_asset_for_slot(pool, 20, rng) is SHORT_CLIP

    def test_empty_pool_returns_none(self):
        assert select_asset_for_slot([], 12, random.Random(0)) is None

    def test_same_seed_same_choices(self):
        pool = [SHORT_CLIP, FEATURE, AMBIENT, SHORT_LECTURE]
        a = [select_asset_for_slot(pool, 13, random.Random(99)).id for _ in range(5)]
        b = [select_asset_for_slot(pool, 13, random.Random(99)).id for _ in range(5)]
        assert a == b


class TestContentKind:

    @pytest.mark.parametrize("hour", [0, 3, 6])
    def test_early_hours_are_reruns(self, hour):
        assert classify_content_kind(hour, random.Random(0)) is ContentKind.RERUN

    @pytest.mark.parametrize("hour", [7, 11, 12, 15, 18, 23])
    def test_other_hours_are_vod(self, hour):
        assert classify_content_kind(hour, random.Random(0)) is ContentKind.VOD

    def test_live_hours_mix_live_and_vod(self):
        rng = random.Random(3)
        kinds = {classify_content_kind(9, rng) for _ in range(200)}
        assert kinds == {ContentKind.LIVE, ContentKind.VOD}

    def test_premiere_only_at_hour_22(self):
        rng = random.Random(3)
        kinds_22 = {classify_content_kind(22, rng) for _ in range(200)}
        kinds_20 = {classify_content_kind(20, rng) for _ in range(200)}
        assert ContentKind.PREMIERE in kinds_22
        assert ContentKind.PREMIERE not in kinds_20
