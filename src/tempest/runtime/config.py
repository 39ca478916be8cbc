"""
Channel configuration data structures and protocols.

Defines ChannelConfig and the ChannelConfigProvider protocol. Channels are
static reference data: the scheduler reads them but never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class ChannelConfig:
    """Configuration for a single channel."""

    channel_id: str
    name: str
    category: str
    color: str
    sort_order: int
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChannelConfig:
        """Deserialize from a dict (JSON or YAML).

        Accepts both ``id``/``channel_id`` and ``sortOrder``/``sort_order``.
        """
        channel_id = data.get("channel_id") or data.get("id")
        if not channel_id:
            raise ValueError("channel entry is missing an id")
        sort_order = data.get("sort_order", data.get("sortOrder", 0))
        return cls(
            channel_id=str(channel_id),
            name=str(data.get("name") or channel_id),
            category=str(data.get("category", "general")),
            color=str(data.get("color", "#6B7280")),
            sort_order=int(sort_order),
            description=str(data.get("description", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.channel_id,
            "name": self.name,
            "category": self.category,
            "color": self.color,
            "sort_order": self.sort_order,
            "description": self.description,
        }


class ChannelConfigProvider(Protocol):
    """Protocol for accessing the ordered channel list."""

    def list_channels(self) -> list[ChannelConfig]:
        """All channels, ordered by sort_order."""
        ...

    def get_channel(self, channel_id: str) -> ChannelConfig | None:
        """One channel by id, or None if unknown."""
        ...


DEFAULT_CHANNELS: tuple[ChannelConfig, ...] = (
    ChannelConfig("campus-pulse", "Campus Pulse", "news", "#3B82F6", 1,
                  "Campus news and updates"),
    ChannelConfig("retirewise", "RetireWise", "travel", "#10B981", 2,
                  "Travel and culture"),
    ChannelConfig("mindfeed", "MindFeed", "education", "#8B5CF6", 3,
                  "Documentaries and educational content"),
    ChannelConfig("career-compass", "Career Compass", "professional", "#F59E0B", 4,
                  "Professional development and career guidance"),
    ChannelConfig("quizquest", "QuizQuest", "interactive", "#EF4444", 5,
                  "Interactive trivia and games"),
    ChannelConfig("studybreak", "StudyBreak", "entertainment", "#F97316", 6,
                  "Entertainment and gaming"),
    ChannelConfig("wellness-wave", "Wellness Wave", "health", "#06B6D4", 7,
                  "Health and lifestyle content"),
    ChannelConfig("how-to-hub", "How-To Hub", "tutorials", "#84CC16", 8,
                  "Tutorials and DIY content"),
)
