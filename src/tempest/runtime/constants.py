"""
Scheduling constants.

Durations are in seconds unless the name says otherwise. Keyword sets are
matched as lowercase substrings of an asset's title, description and tags.
"""

from __future__ import annotations

from datetime import timedelta

SCHEDULE_WINDOW = timedelta(days=7)
# Placeholder programming only covers one day; see DESIGN.md.
PLACEHOLDER_WINDOW = timedelta(days=1)
PLACEHOLDER_BLOCK = timedelta(hours=2)
PLACEHOLDER_THUMBNAIL = "/images/placeholder-thumbnail.jpg"

MIN_SLOT_SECONDS = 30 * 60
DEFAULT_SCHEDULED_SECONDS = 30 * 60
# Advance used when no asset can be chosen for a slot.
EMPTY_SLOT_SKIP = timedelta(hours=1)

REGENERATION_INTERVAL_SECONDS = 60 * 60
REFRESH_INTERVAL_SECONDS = 60
CATALOG_SYNC_INTERVAL_SECONDS = 5 * 60

GUIDE_HOURS_TO_SHOW = 12
GUIDE_MINUTES_PER_SLOT = 30

EDUCATIONAL_KEYWORDS = ("lecture", "tutorial", "education", "learning", "course", "how-to")
RELAXING_KEYWORDS = ("relaxing", "meditation", "ambient", "peaceful", "calm", "sleep", "nature")

DEFAULT_CHANNEL_ID = "campus-pulse"

# Checked in order; the first channel whose keywords match wins.
CHANNEL_KEYWORD_PRIORITY: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("retirewise", ("travel", "trip", "guide", "city", "country", "vacation")),
    ("mindfeed", ("lecture", "education", "learning", "tutorial", "course")),
    ("career-compass", ("career", "job", "business", "startup", "professional")),
    ("wellness-wave", ("wellness", "health", "meditation", "relaxation", "stress")),
    ("how-to-hub", ("how to", "tutorial", "diy", "guide", "tips")),
)
