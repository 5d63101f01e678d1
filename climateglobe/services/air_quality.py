from __future__ import annotations

from typing import Any, List, Optional

import httpx

from climateglobe.core.contracts import EnvironmentalReading
from climateglobe.core.geometry import to_geo_point
from climateglobe.core.keying import namespaced_id
from climateglobe.core.settings import settings
from climateglobe.core.time import iso_or_now
from climateglobe.services.classify import coerce_float
from climateglobe.services.sources import SourceAdapter, map_records, require_list


def _pick_measurement(measurements: Any) -> Optional[dict]:
    """pm25 if present, else the first measurement."""
    if not isinstance(measurements, list):
        return None
    valid = [m for m in measurements if isinstance(m, dict)]
    for m in valid:
        if m.get("parameter") == "pm25":
            return m
    return valid[0] if valid else None


def _openaq_reading(r: Any) -> Optional[EnvironmentalReading]:
    if not isinstance(r, dict):
        return None
    coord = r.get("coordinates")
    if not isinstance(coord, dict):
        return None
    lat, lng = coord.get("latitude"), coord.get("longitude")
    # OpenAQ uses 0,0 as "unknown"
    if not lat and not lng:
        return None
    pt = to_geo_point(lat, lng)
    if pt is None:
        return None

    m = _pick_measurement(r.get("measurements"))
    value = coerce_float(m.get("value") if m else None, 0.0)
    location = str(r.get("location") or r.get("city") or "Unknown")

    return EnvironmentalReading(
        id=namespaced_id("openaq", r.get("location"), fallback=[pt.lat, pt.lng]),
        location=location,
        lat=pt.lat,
        lng=pt.lng,
        airQuality=int(round(value)),
        pollutionIndex=round(value / 50.0, 1),
        timestamp=iso_or_now(m.get("lastUpdated") if m else None),
    )


def _parse_openaq_results(payload: Any, *, limit: int) -> List[EnvironmentalReading]:
    results = require_list("openaq", payload, "results")
    return map_records("openaq", results[:limit], _openaq_reading)


class OpenAqSource(SourceAdapter[EnvironmentalReading]):
    name = "openaq"

    def __init__(self, *, base_url: Optional[str] = None, limit: Optional[int] = None, **kw):
        super().__init__(**kw)
        self.base_url = (base_url or settings.openaq_base_url).rstrip("/")
        self.limit = int(settings.openaq_limit if limit is None else limit)

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            "GET",
            f"{self.base_url}/latest",
            params={
                "limit": str(self.limit),
                "page": "1",
                "offset": "0",
                "sort": "desc",
                "order_by": "lastUpdated",
            },
            headers=self.headers(),
        )

    def parse(self, payload: Any) -> List[EnvironmentalReading]:
        return _parse_openaq_results(payload, limit=self.limit)
