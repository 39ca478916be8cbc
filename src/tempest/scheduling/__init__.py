"""
Scheduling engine: slot packing, schedule cache and periodic refresh.
"""

from .engine import ScheduleSnapshot, SchedulingEngine
from .refresher import ScheduleRefresher

__all__ = ["ScheduleRefresher", "ScheduleSnapshot", "SchedulingEngine"]
