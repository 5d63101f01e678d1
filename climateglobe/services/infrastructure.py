from __future__ import annotations

from functools import partial
from typing import Any, Dict, List, Optional

import httpx

from climateglobe.core.contracts import InfrastructureSite, InfrastructureType
from climateglobe.core.geometry import to_geo_point
from climateglobe.core.keying import namespaced_id
from climateglobe.core.settings import settings
from climateglobe.core.time import utc_now_iso
from climateglobe.services.sources import SourceAdapter, map_records, require_list


# ──────────────────────────────────────────────────────────────
# Overpass querying
# ──────────────────────────────────────────────────────────────

# Order matters: a node tagged both amenity=hospital and harbour is a Hospital.
_OVERPASS_FILTERS: List[str] = [
    '["amenity"="hospital"]',
    '["power"="plant"]',
    '["harbour"]',
    '["amenity"="shelter"]',
]


def _overpass_bbox_str(bbox: str) -> str:
    parts = [p.strip() for p in bbox.split(",")]
    if len(parts) != 4:
        raise ValueError(f"overpass bbox must be 'south,west,north,east', got {bbox!r}")
    return f"({','.join(parts)})"


def build_infrastructure_ql(*, bbox: str, timeout_s: int, max_elements: int) -> str:
    bbox_str = _overpass_bbox_str(bbox)
    parts = [f"node{f}{bbox_str};" for f in _OVERPASS_FILTERS]
    return (
        f"[out:json][timeout:{int(timeout_s)}];"
        f"("
        f'{"".join(parts)}'
        f");"
        f"out center {int(max_elements)};"
    )


def site_type_from_tags(tags: Dict[str, Any]) -> Optional[InfrastructureType]:
    if tags.get("amenity") == "hospital":
        return "Hospital"
    if tags.get("power") == "plant":
        return "Power Plant"
    if tags.get("harbour"):
        return "Port"
    if tags.get("amenity") == "shelter":
        return "Shelter"
    if tags.get("man_made") == "bridge":
        return "Bridge"
    return None


def _overpass_site(el: Any, *, seen_at: str) -> Optional[InfrastructureSite]:
    if not isinstance(el, dict):
        return None

    lat, lon = el.get("lat"), el.get("lon")
    # ways/relations come back with a center instead of lat/lon
    center = el.get("center")
    if (lat is None or lon is None) and isinstance(center, dict):
        lat, lon = center.get("lat"), center.get("lon")
    pt = to_geo_point(lat, lon)
    if pt is None:
        return None

    tags = el.get("tags")
    if not isinstance(tags, dict):
        tags = {}
    site_type = site_type_from_tags(tags)
    if site_type is None:
        return None

    return InfrastructureSite(
        id=namespaced_id("osm", el.get("id"), fallback=[pt.lat, pt.lng, tags]),
        name=str(tags.get("name") or f"{site_type} (OSM)"),
        type=site_type,
        lat=pt.lat,
        lng=pt.lng,
        status="Operational",
        lastUpdated=seen_at,
    )


def _parse_overpass_elements(payload: Any, *, limit: int) -> List[InfrastructureSite]:
    elements = require_list("osm", payload, "elements")
    return map_records("osm", elements[:limit], partial(_overpass_site, seen_at=utc_now_iso()))


class OverpassInfrastructureSource(SourceAdapter[InfrastructureSite]):
    name = "osm"

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        bbox: Optional[str] = None,
        limit: Optional[int] = None,
        timeout_s: Optional[int] = None,
        **kw,
    ):
        super().__init__(**kw)
        self.url = url or settings.overpass_url
        self.bbox = bbox or settings.overpass_bbox
        self.limit = int(settings.overpass_max_elements if limit is None else limit)
        self.timeout_s = int(settings.overpass_timeout_s if timeout_s is None else timeout_s)
        # bad bbox config fails here, not mid-cycle
        self.ql = self.query()

    def query(self) -> str:
        return build_infrastructure_ql(
            bbox=self.bbox, timeout_s=self.timeout_s, max_elements=self.limit
        )

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            "POST",
            self.url,
            data={"data": self.ql},
            headers=self.headers(),
        )

    def parse(self, payload: Any) -> List[InfrastructureSite]:
        return _parse_overpass_elements(payload, limit=self.limit)
