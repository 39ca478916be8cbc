"""
Keyword heuristics over asset text.

All matching is lowercase substring matching against the asset's title,
description and tags joined together.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..runtime.constants import (
    CHANNEL_KEYWORD_PRIORITY,
    DEFAULT_CHANNEL_ID,
    EDUCATIONAL_KEYWORDS,
    RELAXING_KEYWORDS,
)
from ..runtime.schedule_types import VideoAsset


def matches_keywords(asset: VideoAsset, keywords: Iterable[str]) -> bool:
    text = asset.searchable_text
    return any(keyword in text for keyword in keywords)


def is_educational(asset: VideoAsset) -> bool:
    return matches_keywords(asset, EDUCATIONAL_KEYWORDS)


def is_relaxing(asset: VideoAsset) -> bool:
    return matches_keywords(asset, RELAXING_KEYWORDS)


def classify_channel(
    asset: VideoAsset,
    rules: Sequence[tuple[str, Sequence[str]]] = CHANNEL_KEYWORD_PRIORITY,
    default_channel_id: str = DEFAULT_CHANNEL_ID,
) -> str:
    """Pick the channel for an unassigned asset.

    Rules are tested in order and the first match wins, so an asset that
    mentions both travel and lectures lands on the travel channel.
    """
    for channel_id, keywords in rules:
        if matches_keywords(asset, keywords):
            return channel_id
    return default_channel_id
