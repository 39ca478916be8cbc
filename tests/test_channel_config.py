"""Tests for channel configuration providers."""

from __future__ import annotations

import pytest

from tempest.runtime.config import ChannelConfig
from tempest.runtime.providers import StaticChannelConfigProvider, YamlChannelConfigProvider


class TestStaticProvider:

    def test_default_channels_sorted(self):
        provider = StaticChannelConfigProvider()
        ids = [c.channel_id for c in provider.list_channels()]
        assert ids == [
            "campus-pulse", "retirewise", "mindfeed", "career-compass",
            "quizquest", "studybreak", "wellness-wave", "how-to-hub",
        ]

    def test_duplicate_ids_rejected(self):
        channel = ChannelConfig("a", "A", "general", "#000", 1)
        with pytest.raises(ValueError):
            StaticChannelConfigProvider([channel, channel])

    def test_from_dict_accepts_camel_case(self):
        channel = ChannelConfig.from_dict({"id": "x", "name": "X", "sortOrder": 4})
        assert channel.channel_id == "x"
        assert channel.sort_order == 4
        assert channel.to_dict()["id"] == "x"


class TestYamlProvider:

    def test_loads_and_sorts(self, tmp_path):
        path = tmp_path / "channels.yaml"
        path.write_text(
            "channels:\n"
            "  - id: late\n"
            "    name: Late Show\n"
            "    sort_order: 2\n"
            "  - channel_id: early\n"
            "    name: Early Bird\n"
            "    sort_order: 1\n"
        )
        provider = YamlChannelConfigProvider(path)

        assert [c.channel_id for c in provider.list_channels()] == ["early", "late"]
        assert provider.get_channel("late").name == "Late Show"

    def test_include_tag(self, tmp_path):
        (tmp_path / "shared.yaml").write_text(
            "news:\n  id: news\n  name: Newsroom\n  category: news\n  sort_order: 1\n"
        )
        path = tmp_path / "channels.yaml"
        path.write_text("channels:\n  - !include shared.yaml:news\n")

        provider = YamlChannelConfigProvider(path)

        assert provider.get_channel("news").category == "news"

    def test_channels_must_be_a_list(self, tmp_path):
        path = tmp_path / "channels.yaml"
        path.write_text("channels: nope\n")
        with pytest.raises(ValueError):
            YamlChannelConfigProvider(path)
