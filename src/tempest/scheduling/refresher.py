"""Schedule Refresher — background upkeep for the scheduling engine.

Every tick (once a minute by default) re-points each channel's "now
playing" entry. At most once per regeneration interval (hourly by default)
it also syncs the catalog when a sync is due and rebuilds every schedule.

Evaluation via tick() or a background daemon thread via start()/stop().
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta

from ..catalog.video_library import VideoLibraryManager
from ..infra.exceptions import SourceUnavailableError
from ..runtime.clock import MasterClock
from ..runtime.constants import REFRESH_INTERVAL_SECONDS, REGENERATION_INTERVAL_SECONDS
from .engine import SchedulingEngine


class ScheduleRefresher:
    """Clock-driven refresh loop for one engine."""

    def __init__(
        self,
        engine: SchedulingEngine,
        clock: MasterClock,
        library: VideoLibraryManager | None = None,
        refresh_interval_seconds: int = REFRESH_INTERVAL_SECONDS,
        regeneration_interval_seconds: int = REGENERATION_INTERVAL_SECONDS,
    ):
        if refresh_interval_seconds <= 0 or regeneration_interval_seconds <= 0:
            raise ValueError("refresh intervals must be positive")
        self._engine = engine
        self._clock = clock
        self._library = library
        self._refresh_interval_s = refresh_interval_seconds
        self._regeneration_interval = timedelta(seconds=regeneration_interval_seconds)
        self._logger = logging.getLogger(__name__)

        self._last_regeneration_attempt: datetime | None = None
        self._tick_count = 0
        self._regeneration_count = 0

        # Background thread
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public properties (observability)
    # ------------------------------------------------------------------

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def regeneration_count(self) -> int:
        """Regenerations attempted by this refresher (successful or not)."""
        return self._regeneration_count

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Core evaluation
    # ------------------------------------------------------------------

    def regeneration_due(self) -> bool:
        last = self._last_regeneration_attempt
        generated = self._engine.last_regenerated_at
        if generated is not None and (last is None or generated > last):
            last = generated
        if last is None:
            return True
        elapsed = self._clock.now_utc() - last
        return elapsed >= self._regeneration_interval

    def tick(self) -> bool:
        """Refresh pointers; regenerate when due. Returns True if it regenerated."""
        self._tick_count += 1
        self._engine.refresh_current_programs()

        if not self.regeneration_due():
            return False

        self._sync_catalog_if_due()
        self._last_regeneration_attempt = self._clock.now_utc()
        self._regeneration_count += 1
        ok = self._engine.regenerate()
        level = logging.INFO if ok else logging.WARNING
        self._logger.log(
            level,
            "ScheduleRefresher: regeneration %s (tick=%d)",
            "completed" if ok else "failed, keeping previous schedule",
            self._tick_count,
        )
        return True

    def _sync_catalog_if_due(self) -> None:
        if self._library is None or not self._library.should_sync():
            return
        for source in self._library.sources:
            try:
                self._library.sync(source)
            except SourceUnavailableError as exc:
                self._logger.warning(
                    "ScheduleRefresher: catalog sync skipped for %s: %s", exc.source, exc.reason
                )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background refresh thread."""
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="ScheduleRefresher",
            daemon=True,
        )
        self._thread.start()
        self._logger.info(
            "ScheduleRefresher: started (interval=%ds)", self._refresh_interval_s,
        )

    def stop(self) -> None:
        """Stop the background thread, letting an in-flight tick finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self._logger.info("ScheduleRefresher: stopped")

    def _run_loop(self) -> None:
        """Background loop: tick → sleep → repeat."""
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                self._logger.exception("ScheduleRefresher: tick failed")
            self._stop_event.wait(timeout=self._refresh_interval_s)
