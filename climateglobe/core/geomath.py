from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from climateglobe.core.contracts import GeoPoint


EARTH_RADIUS_KM = 6371.0

_ZERO_MEAN_EPS = 1e-12


def _wrap_lng(lng: float) -> float:
    wrapped = (lng + 540.0) % 360.0 - 180.0
    # keep +180 rather than folding it to -180
    if wrapped == -180.0 and lng > 0:
        return 180.0
    return wrapped


def spherical_centroid(vertices: Iterable[Tuple[float, float]]) -> Optional[GeoPoint]:
    """
    Centroid of (lon, lat) vertices via 3D unit-vector averaging.

    Handles rings crossing the antimeridian. Returns None for empty input or
    when the mean vector is (near) zero, e.g. antipodal points.
    """
    sx = sy = sz = 0.0
    n = 0
    for lon, lat in vertices:
        phi = math.radians(lat)
        lam = math.radians(lon)
        cos_phi = math.cos(phi)
        sx += cos_phi * math.cos(lam)
        sy += cos_phi * math.sin(lam)
        sz += math.sin(phi)
        n += 1

    if n == 0:
        return None

    mx, my, mz = sx / n, sy / n, sz / n
    norm = math.sqrt(mx * mx + my * my + mz * mz)
    if norm < _ZERO_MEAN_EPS:
        return None

    lat = math.degrees(math.asin(max(-1.0, min(1.0, mz / norm))))
    lng = math.degrees(math.atan2(my, mx))
    return GeoPoint(lat=lat, lng=_wrap_lng(lng))


def destination_point(
    lat: float,
    lng: float,
    bearing_deg: float,
    distance_km: float,
    *,
    radius_km: float = EARTH_RADIUS_KM,
) -> GeoPoint:
    """Great-circle destination from a start point, bearing (clockwise from north) and distance."""
    phi1 = math.radians(lat)
    lam1 = math.radians(lng)
    theta = math.radians(bearing_deg)
    delta = distance_km / radius_km

    sin_phi2 = math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    phi2 = math.asin(max(-1.0, min(1.0, sin_phi2)))
    lam2 = lam1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    return GeoPoint(lat=math.degrees(phi2), lng=_wrap_lng(math.degrees(lam2)))


def haversine_km(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Distance in km between two (lat, lng) points."""
    lat1, lon1 = math.radians(a[0]), math.radians(a[1])
    lat2, lon2 = math.radians(b[0]), math.radians(b[1])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    x = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2.0 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(x)))
