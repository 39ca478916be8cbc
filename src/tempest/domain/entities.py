"""
SQLAlchemy mapping of the platform ``content`` table.

The table is owned by the content-management side of the platform; the
scheduler only reads published rows from it to populate the video catalog.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..infra.db import Base


class ContentRecord(Base):
    """A video uploaded to the platform and hosted by the streaming provider."""

    __tablename__ = "content"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    channel_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    cloudflare_video_id: Mapped[str] = mapped_column(String(64), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<ContentRecord(id={self.id}, title={self.title!r}, channel_id={self.channel_id})>"

    def to_record(self) -> dict[str, Any]:
        """Return the row as a plain asset record understood by the catalog."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description or "",
            "channel_id": self.channel_id,
            "cloudflare_video_id": self.cloudflare_video_id,
            "thumbnail_url": self.thumbnail_url or "",
            "duration": self.duration or 0,
            "category": self.category or "general",
            "tags": list(self.tags or []),
            "created_at": self.created_at,
            "last_synced_at": self.last_synced_at,
            "metadata": dict(self.metadata_ or {}),
        }
