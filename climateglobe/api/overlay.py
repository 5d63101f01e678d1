from __future__ import annotations

import logging
from typing import AsyncIterator, List, Optional

import httpx
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from climateglobe.core.contracts import AggregationSnapshot, OverlayPoint, ProjectedPath
from climateglobe.core.errors import Err, bad_request, service_unavailable
from climateglobe.core.geometry import to_geo_point
from climateglobe.core.settings import settings
from climateglobe.services.aggregator import Aggregator
from climateglobe.services.paths import downwind_bearing, project_from_wind, project_path
from climateglobe.services.weather import fetch_point_weather

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/overlay")


def get_aggregator() -> Aggregator:
    raise RuntimeError("Aggregator must be provided by app dependency override")


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.overlays_timeout_s, follow_redirects=True) as client:
        yield client


@router.get("", response_model=List[OverlayPoint])
async def overlay_points(agg: Aggregator = Depends(get_aggregator)) -> List[OverlayPoint]:
    return await agg.overlay()


@router.get("/raw", response_model=AggregationSnapshot)
async def overlay_raw(agg: Aggregator = Depends(get_aggregator)) -> AggregationSnapshot:
    return await agg.refresh()


# ──────────────────────────────────────────────────────────────
# Projected hazard path (heuristic)
# ──────────────────────────────────────────────────────────────

class PathRequest(BaseModel):
    lat: float
    lng: float
    bearing_deg: Optional[float] = None
    speed_kmh: Optional[float] = None
    hours: Optional[int] = None
    step_hours: Optional[int] = None


@router.post("/path", response_model=ProjectedPath)
async def overlay_path(
    req: PathRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ProjectedPath:
    start = to_geo_point(req.lat, req.lng)
    if start is None:
        bad_request("bad_path_request", "lat/lng out of range")
    if req.hours is not None and req.hours <= 0:
        bad_request("bad_path_request", "hours must be positive")
    if req.step_hours is not None and req.step_hours <= 0:
        bad_request("bad_path_request", "step_hours must be positive")
    if req.speed_kmh is not None and req.speed_kmh < 0:
        bad_request("bad_path_request", "speed_kmh must be >= 0")

    if req.bearing_deg is not None and req.speed_kmh is not None:
        return project_path(
            start,
            bearing_deg=req.bearing_deg,
            speed_kmh=req.speed_kmh,
            hours=req.hours,
            step_hours=req.step_hours,
        )

    res = await fetch_point_weather(client, start.lat, start.lng)
    if isinstance(res, Err):
        logger.warning("path_weather_failed %s", res.describe())
        service_unavailable("weather_unavailable", res.describe())

    # explicit values win over observed wind
    update: dict = {}
    if req.bearing_deg is not None:
        # travel bearing -> "wind from" direction
        update["wind_direction_deg"] = downwind_bearing(req.bearing_deg)
    if req.speed_kmh is not None:
        update["wind_speed_kmh"] = req.speed_kmh
    wind = res.value.model_copy(update=update)

    path = project_from_wind(start, wind, hours=req.hours, step_hours=req.step_hours)
    if path is None:
        service_unavailable("weather_unavailable", "no current wind at this point")
    return path
