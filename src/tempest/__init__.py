"""
Tempest — 24/7 channel scheduling for the university streaming platform.

Builds gapless per-channel schedules from the video catalog and serves
"now playing", "up next" and program-guide queries over them.
"""

__version__ = "0.4.0"
