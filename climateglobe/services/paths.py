# climateglobe/services/paths.py
"""
Coarse hazard path projection.

Straight great-circle extrapolation of the current wind from a hazard's
position, sampled at fixed time steps. This is a visualization aid for the
globe, NOT a meteorological forecast; every ProjectedPath carries a
disclaimer saying so.
"""
from __future__ import annotations

from typing import Optional

from climateglobe.core.contracts import GeoPoint, PathPoint, PointWeather, ProjectedPath
from climateglobe.core.geomath import destination_point
from climateglobe.core.settings import settings
from climateglobe.services.weather import is_storm_forecast


def project_path(
    start: GeoPoint,
    *,
    bearing_deg: float,
    speed_kmh: float,
    hours: Optional[int] = None,
    step_hours: Optional[int] = None,
) -> ProjectedPath:
    total = int(settings.path_hours if hours is None else hours)
    step = int(settings.path_step_hours if step_hours is None else step_hours)
    if step <= 0 or total <= 0:
        raise ValueError("hours and step_hours must be positive")
    if speed_kmh < 0:
        raise ValueError("speed_kmh must be >= 0")

    bearing = bearing_deg % 360.0
    points = []
    for t in range(step, total + 1, step):
        p = destination_point(start.lat, start.lng, bearing, speed_kmh * t)
        points.append(PathPoint(lat=p.lat, lng=p.lng, hours_ahead=float(t)))

    return ProjectedPath(start=start, bearing_deg=bearing, speed_kmh=speed_kmh, points=points)


def downwind_bearing(wind_from_deg: float) -> float:
    """Meteorological wind direction is where it blows FROM; travel is opposite."""
    return (wind_from_deg + 180.0) % 360.0


def project_from_wind(
    start: GeoPoint,
    weather: PointWeather,
    *,
    hours: Optional[int] = None,
    step_hours: Optional[int] = None,
) -> Optional[ProjectedPath]:
    """
    None when the weather has no usable current wind. The path is flagged
    `storm_likely` from the same forecast.
    """
    if weather.wind_direction_deg is None or weather.wind_speed_kmh is None:
        return None
    path = project_path(
        start,
        bearing_deg=downwind_bearing(weather.wind_direction_deg),
        speed_kmh=max(0.0, weather.wind_speed_kmh),
        hours=hours,
        step_hours=step_hours,
    )
    return path.model_copy(update={"storm_likely": is_storm_forecast(weather)})
