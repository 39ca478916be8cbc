"""
REST API endpoints for channel schedules and the program guide.

Every successful response is wrapped as ``{"success": true, "data": ...}``.
InvalidInputError and NotFoundError raised here are turned into 400 and 404
responses by the handlers installed in :mod:`tempest.web.server`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from ...bootstrap import Services
from ...infra.exceptions import InvalidInputError, NotFoundError
from ...infra.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/schedule", tags=["schedule"])

SCHEDULE_TYPES = ("all", "current", "next", "guide")


def get_services(request: Request) -> Services:
    """Services are attached to the app at startup."""
    return request.app.state.services


def _ok(data: Any, **extra: Any) -> dict[str, Any]:
    return {"success": True, "data": data, **extra}


def _item(item) -> dict[str, Any] | None:
    return item.to_dict() if item is not None else None


# ============================================================================
# Pydantic Models for Request/Response
# ============================================================================


class ScheduleRequest(BaseModel):
    """Request model for placing an asset on a channel."""
    channel_id: str = Field(..., description="Target channel id")
    asset_id: str = Field(..., description="Catalog asset id")
    start_time: datetime = Field(..., description="Start time with timezone offset")
    duration_seconds: int | None = Field(None, ge=0, description="Override the asset duration")


# ============================================================================
# Read endpoints
# ============================================================================


@router.get("")
async def get_schedule(
    type: str = Query("all", description="all | current | next | guide"),
    channel: str | None = Query(None, description="Channel ID filter"),
    start_time: datetime | None = Query(None, description="Window start (defaults to now)"),
    hours: int | None = Query(None, description="Window length in hours"),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Dispatch on ``type`` the way the guide UI asks for schedule data."""
    if type not in SCHEDULE_TYPES:
        raise InvalidInputError(f"type must be one of {', '.join(SCHEDULE_TYPES)}")
    epg = services.epg

    if type == "current":
        if channel:
            return _ok(_item(epg.current_program(channel)))
        return _ok({cid: item.to_dict() for cid, item in epg.current_programs().items()})

    if type == "next":
        if channel:
            return _ok(_item(epg.next_program(channel)))
        return _ok({cid: item.to_dict() for cid, item in epg.next_programs().items()})

    if type == "guide":
        return _ok(epg.guide(start_time, hours).to_dict())

    if not channel:
        raise HTTPException(status_code=400, detail="Channel ID is required for schedule lookup")
    config = epg.get_channel(channel)
    if config is None:
        raise HTTPException(status_code=400, detail="Invalid channel ID")

    guide = epg.guide(start_time, hours)
    programs = guide.programs_by_channel.get(channel, [])
    return _ok(
        {
            "channel": config.to_dict(),
            "programs": [p.to_dict() for p in programs],
            "start_time": guide.start.isoformat(),
            "end_time": guide.end.isoformat(),
            "count": len(programs),
        }
    )


@router.get("/day/{channel_id}")
async def get_day_schedule(
    channel_id: str,
    day_offset: int = Query(0, description="0 = today, up to 6 days ahead"),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    if services.epg.get_channel(channel_id) is None:
        raise NotFoundError("channel_not_found")
    items = services.epg.day_schedule(channel_id, day_offset)
    return _ok([i.to_dict() for i in items])


@router.get("/search")
async def search_programs(
    q: str = Query(..., description="Case-insensitive title/description match"),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    results = services.epg.search(q)
    return _ok([i.to_dict() for i in results], count=len(results))


@router.get("/stats")
async def schedule_stats(services: Services = Depends(get_services)) -> dict[str, Any]:
    return _ok(services.epg.stats().to_dict())


@router.get("/programs/{program_id}")
async def get_program(program_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    item = services.engine.get_program(program_id)
    if item is None:
        raise NotFoundError("program_not_found")
    return _ok(item.to_dict())


# ============================================================================
# Write endpoints
# ============================================================================
#
# Sync handlers: the engine write lock must not be taken on the event loop.


@router.post("", status_code=201)
def create_scheduled_item(
    body: ScheduleRequest,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Place an asset at a future start time, evicting overlapping programs."""
    if services.epg.get_channel(body.channel_id) is None:
        raise HTTPException(status_code=400, detail="Invalid channel ID")
    if body.start_time.tzinfo is None:
        raise InvalidInputError("start_time must include a timezone offset")
    if body.start_time <= services.engine.clock.now_utc():
        raise InvalidInputError("Start time must be in the future")

    result = services.engine.schedule_asset(
        body.channel_id, body.asset_id, body.start_time, body.duration_seconds
    )
    if not result:
        raise NotFoundError(result.error)
    return _ok(result.item.to_dict(), message="Asset scheduled successfully")


@router.delete("/{channel_id}/{item_id}")
def delete_scheduled_item(
    channel_id: str,
    item_id: str,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    result = services.engine.remove_scheduled_item(channel_id, item_id)
    if not result:
        raise NotFoundError(result.error)
    return _ok(result.item.to_dict(), message="Scheduled program removed successfully")


@router.post("/regenerate")
def regenerate_schedules(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Rebuild every channel; a failed rebuild keeps the previous schedule."""
    engine = services.engine
    ok = engine.regenerate()
    if not ok:
        logger.warning("api.regeneration_failed")
    generated_at = engine.last_regenerated_at
    return {
        "success": ok,
        "data": {"generated_at": generated_at.isoformat() if generated_at else None},
    }
