"""
Time-of-day rules used when packing a channel's schedule.

Dayparts:
    06-12  morning     short (<= 45 min) educational content
    12-18  afternoon   anything up to 90 min
    18-22  evening     30 min or longer
    22-06  late night  relaxing content, or anything an hour or longer

All randomness comes from the ``rng`` argument so callers can seed it.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from ..catalog.classifier import is_educational, is_relaxing
from ..runtime.schedule_types import ContentKind, VideoAsset

MORNING_MAX_SECONDS = 45 * 60
AFTERNOON_MAX_SECONDS = 90 * 60
EVENING_MIN_SECONDS = 30 * 60
LATE_NIGHT_MIN_SECONDS = 60 * 60

LIVE_HOURS = frozenset({8, 9, 10, 19, 20, 21})
PREMIERE_HOURS = frozenset({20, 21, 22})
RERUN_HOURS = frozenset(range(0, 7))
LIVE_PROBABILITY = 0.3
PREMIERE_PROBABILITY = 0.2


def is_suitable_for_hour(asset: VideoAsset, hour: int) -> bool:
    duration = asset.duration_seconds
    if 6 <= hour < 12:
        return duration <= MORNING_MAX_SECONDS and is_educational(asset)
    if 12 <= hour < 18:
        return duration <= AFTERNOON_MAX_SECONDS
    if 18 <= hour < 22:
        return duration >= EVENING_MIN_SECONDS
    return is_relaxing(asset) or duration >= LATE_NIGHT_MIN_SECONDS


def select_asset_for_slot(
    assets: Sequence[VideoAsset], hour: int, rng: random.Random
) -> VideoAsset | None:
    """Pick uniformly among assets suited to ``hour``.

    Falls back to the whole list when nothing suits the hour; returns None
    only for an empty list.
    """
    if not assets:
        return None
    candidates = [a for a in assets if is_suitable_for_hour(a, hour)] or list(assets)
    return candidates[rng.randrange(len(candidates))]


def classify_content_kind(hour: int, rng: random.Random) -> ContentKind:
    """Cosmetic label for a generated slot, independent of the asset."""
    if hour in LIVE_HOURS:
        return ContentKind.LIVE if rng.random() < LIVE_PROBABILITY else ContentKind.VOD
    # Only hour 22 reaches this branch; 20 and 21 were taken above.
    if hour in PREMIERE_HOURS:
        return ContentKind.PREMIERE if rng.random() < PREMIERE_PROBABILITY else ContentKind.VOD
    if hour in RERUN_HOURS:
        return ContentKind.RERUN
    return ContentKind.VOD
