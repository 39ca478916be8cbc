"""
External asset sources the catalog loads from.

Each source returns plain record dicts; turning them into VideoAsset values
(and skipping the malformed ones) is the catalog's job.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.entities import ContentRecord
from ..infra.exceptions import SourceUnavailableError
from ..infra.uow import session


@runtime_checkable
class AssetSource(Protocol):
    """Bulk-fetch interface for asset metadata."""

    name: str

    def fetch_assets(self) -> list[dict[str, Any]]:
        """Return every asset record the source knows about.

        Raises:
            SourceUnavailableError: when the backing store cannot be read.
        """
        ...


class DatabaseAssetSource:
    """Reads published rows from the platform ``content`` table."""

    name = "database"

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        include_unpublished: bool = False,
    ) -> None:
        self._session_factory = session_factory
        self._include_unpublished = include_unpublished

    def fetch_assets(self) -> list[dict[str, Any]]:
        stmt = select(ContentRecord).order_by(ContentRecord.created_at.desc(), ContentRecord.id)
        if not self._include_unpublished:
            stmt = stmt.where(ContentRecord.is_published.is_(True))
        try:
            with session(self._session_factory) as db:
                return [row.to_record() for row in db.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise SourceUnavailableError(self.name, str(exc)) from exc


class JsonAssetSource:
    """Read-only asset source backed by a JSON catalog file.

    The file holds either a top-level list of records or ``{"assets": [...]}``.
    """

    def __init__(self, catalog_path: str | Path) -> None:
        self.catalog_path = Path(catalog_path)
        self.name = f"json:{self.catalog_path.name}"

    def fetch_assets(self) -> list[dict[str, Any]]:
        try:
            with open(self.catalog_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise SourceUnavailableError(self.name, str(exc)) from exc

        records = data.get("assets", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise SourceUnavailableError(self.name, "catalog does not contain a list of assets")
        return [r for r in records if isinstance(r, dict)]
