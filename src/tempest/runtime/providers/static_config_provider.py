"""
In-memory channel configuration provider.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..config import DEFAULT_CHANNELS, ChannelConfig


class StaticChannelConfigProvider:
    """Serves a fixed channel list (the built-in university channels by default)."""

    def __init__(self, channels: Iterable[ChannelConfig] | None = None) -> None:
        source = DEFAULT_CHANNELS if channels is None else tuple(channels)
        ids = [c.channel_id for c in source]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate channel ids in channel configuration")
        self._channels = sorted(source, key=lambda c: (c.sort_order, c.channel_id))
        self._by_id = {c.channel_id: c for c in self._channels}

    def list_channels(self) -> list[ChannelConfig]:
        return list(self._channels)

    def get_channel(self, channel_id: str) -> ChannelConfig | None:
        return self._by_id.get(channel_id)
