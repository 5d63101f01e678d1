# climateglobe/core/geometry.py
"""
Coordinate extraction from heterogeneous provider geometry.

Providers hand us GeoJSON-style coordinate arrays of unknown depth:

  Point         [lon, lat]
  Polygon       [[[lon, lat], ...], ...]
  MultiPolygon  [[[[lon, lat], ...], ...], ...]

`first_lon_lat` walks first elements until it meets a numeric pair. For a
polygon that is the first vertex of the first ring, which is a usable marker
position, not a centroid (see geomath.spherical_centroid for that).
"""
from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Tuple

from climateglobe.core.contracts import GeoPoint


LonLat = Tuple[float, float]


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _is_seq(x: Any) -> bool:
    return isinstance(x, (list, tuple))


def _is_pair(node: Any) -> bool:
    return _is_seq(node) and len(node) >= 2 and _is_number(node[0]) and _is_number(node[1])


def first_lon_lat(node: Any) -> Optional[LonLat]:
    """
    First (lon, lat) numeric pair found by descending into first elements.

    >>> first_lon_lat([[[10.0, 20.0], [11.0, 21.0]]])
    (10.0, 20.0)
    >>> first_lon_lat([[["a", "b"]]]) is None
    True
    """
    cur = node
    # Iterative descent; nesting depth is provider controlled.
    while _is_seq(cur):
        if _is_pair(cur):
            return (float(cur[0]), float(cur[1]))
        if not cur:
            return None
        cur = cur[0]
    return None


def is_valid_lat_lng(lat: Any, lng: Any) -> bool:
    if not _is_number(lat) or not _is_number(lng):
        return False
    lat_f, lng_f = float(lat), float(lng)
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return False
    return -90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0


def to_geo_point(lat: Any, lng: Any) -> Optional[GeoPoint]:
    if not is_valid_lat_lng(lat, lng):
        return None
    return GeoPoint(lat=float(lat), lng=float(lng))


def normalize_point(node: Any) -> Optional[GeoPoint]:
    """Nested coordinates -> GeoPoint, or None when unresolvable/out of range."""
    pair = first_lon_lat(node)
    if pair is None:
        return None
    lon, lat = pair
    return to_geo_point(lat, lon)


def ring_vertices(node: Any) -> List[LonLat]:
    """
    Vertices of the first ring of the first polygon.

    Returns [] for a bare point, for anything without at least one numeric
    pair, and for a ring holding any vertex that is not a valid lat/lng.
    """
    if not _is_seq(node) or _is_pair(node):
        return []

    cur: Sequence[Any] = node
    # Descend until the children are pairs, i.e. `cur` is a ring.
    while cur and _is_seq(cur[0]) and not _is_pair(cur[0]):
        cur = cur[0]

    out: List[LonLat] = []
    for p in cur:
        if not _is_pair(p):
            continue
        if not is_valid_lat_lng(p[1], p[0]):
            return []
        out.append((float(p[0]), float(p[1])))
    return out
