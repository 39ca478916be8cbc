"""
Cold-start warm cache for the video catalog.

The snapshot lets a restarted process serve schedules before the asset
source answers. It is never treated as the source of truth.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from ..runtime.schedule_types import parse_timestamp

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    assets: list[dict[str, Any]]
    channel_assets: dict[str, list[str]]
    last_sync: datetime | None


class SnapshotStore(Protocol):
    def load(self) -> CatalogSnapshot | None: ...

    def save(self, snapshot: CatalogSnapshot) -> None: ...

    def clear(self) -> None: ...


class JsonSnapshotStore:
    """Snapshot persisted as a single JSON document, replaced atomically."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> CatalogSnapshot | None:
        """Return the stored snapshot, or None when absent or unreadable."""
        if not self.path.is_file():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return CatalogSnapshot(
                assets=list(data.get("assets", [])),
                channel_assets={
                    str(k): [str(v) for v in ids]
                    for k, ids in (data.get("channel_assets") or {}).items()
                },
                last_sync=parse_timestamp(data.get("last_sync")),
            )
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            _logger.warning("Ignoring unreadable catalog snapshot %s: %s", self.path, exc)
            return None

    def save(self, snapshot: CatalogSnapshot) -> None:
        payload = {
            "assets": snapshot.assets,
            "channel_assets": snapshot.channel_assets,
            "last_sync": snapshot.last_sync.isoformat() if snapshot.last_sync else None,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, default=str)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
