"""Asteroid browsing routes (NeoWs), each object annotated with risk_analysis."""
from datetime import date
from typing import Any

from fastapi import APIRouter, Query

from neo_watch.deps import AsteroidServiceDep, CurrentPrincipal

router = APIRouter(prefix="/asteroids", tags=["asteroids"])


@router.get("/feed")
async def get_feed(
    service: AsteroidServiceDep,
    _: CurrentPrincipal,
    start_date: date | None = Query(default=None, description="YYYY-MM-DD, defaults to today"),
    end_date: date | None = Query(default=None, description="YYYY-MM-DD, defaults to today"),
) -> dict[str, Any]:
    """Get objects with close approaches in a date window, keyed by date."""
    return await service.feed(start_date, end_date)


@router.get("/browse")
async def browse(
    service: AsteroidServiceDep,
    _: CurrentPrincipal,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=100),
) -> dict[str, Any]:
    """Page through the NEO catalogue."""
    return await service.browse(page, size)


@router.get("/{external_id}")
async def get_asteroid(
    external_id: str,
    service: AsteroidServiceDep,
    _: CurrentPrincipal,
) -> dict[str, Any]:
    """Get one object by NeoWs id."""
    return await service.lookup(external_id)
