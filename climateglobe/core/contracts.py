from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ──────────────────────────────────────────────────────────────
# Shared
# ──────────────────────────────────────────────────────────────

class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float

    @field_validator("lat")
    @classmethod
    def _lat_in_range(cls, v: float) -> float:
        if not math.isfinite(v) or not -90.0 <= v <= 90.0:
            raise ValueError(f"latitude out of range: {v}")
        return v

    @field_validator("lng")
    @classmethod
    def _lng_in_range(cls, v: float) -> float:
        if not math.isfinite(v) or not -180.0 <= v <= 180.0:
            raise ValueError(f"longitude out of range: {v}")
        return v


# ──────────────────────────────────────────────────────────────
# Normalized event model
# ──────────────────────────────────────────────────────────────

HazardCategory = Literal["Storm", "Flood", "Wildfire", "Earthquake"]
HazardSeverity = Literal["Low", "Medium", "High"]

InfrastructureType = Literal["Hospital", "Power Plant", "Port", "Bridge", "Shelter"]
InfrastructureStatus = Literal["Operational", "Degraded", "Offline"]


class HazardEvent(GeoPoint):
    id: str                         # "<source-prefix>-<native-id>"
    title: str
    category: HazardCategory = "Storm"
    intensity: float = Field(default=0.0, ge=0.0, le=10.0)
    detectedAt: str                 # ISO8601
    source: str                     # "NASA EONET", "USGS", "FEMA"
    severity: HazardSeverity = "Medium"
    description: Optional[str] = None


class InfrastructureSite(GeoPoint):
    id: str                         # "osm-<node id>"
    name: str
    type: InfrastructureType
    # OSM carries no live status
    status: InfrastructureStatus = "Operational"
    lastUpdated: str


class EnvironmentalReading(GeoPoint):
    id: str                         # "openaq-<location>"
    location: str
    airQuality: int
    pollutionIndex: float
    co2Level: int = 400             # OpenAQ has no CO2; nominal background level
    timestamp: str


# ──────────────────────────────────────────────────────────────
# Renderer handoff
# ──────────────────────────────────────────────────────────────

OverlayKind = Literal["hazard", "infrastructure"]


class OverlayPoint(GeoPoint):
    size: float
    color: str
    label: str
    kind: OverlayKind
    original: Union[HazardEvent, InfrastructureSite]


class RawCollections(BaseModel):
    hazards: List[HazardEvent] = Field(default_factory=list)
    infrastructure: List[InfrastructureSite] = Field(default_factory=list)


class AggregationSnapshot(RawCollections):
    cycle: int
    created_at: str
    algo_version: str
    environmental: List[EnvironmentalReading] = Field(default_factory=list)
    overlay: List[OverlayPoint] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


# ──────────────────────────────────────────────────────────────
# Weather + projected paths
# ──────────────────────────────────────────────────────────────

class PointWeather(BaseModel):
    lat: float
    lng: float
    wind_speed_kmh: Optional[float] = None
    wind_direction_deg: Optional[float] = None   # meteorological: direction wind comes FROM
    wind_gusts_kmh: Optional[float] = None
    hourly: Dict[str, List[Any]] = Field(default_factory=dict)
    daily: Dict[str, List[Any]] = Field(default_factory=dict)


PATH_DISCLAIMER = (
    "Heuristic visualization aid: straight great-circle extrapolation of the "
    "current wind. Not a meteorological forecast."
)


class PathPoint(GeoPoint):
    hours_ahead: float


class ProjectedPath(BaseModel):
    start: GeoPoint
    bearing_deg: float
    speed_kmh: float
    points: List[PathPoint] = Field(default_factory=list)
    # set only when the path came from point weather
    storm_likely: Optional[bool] = None
    disclaimer: str = PATH_DISCLAIMER
