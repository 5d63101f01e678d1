# climateglobe/services/hazards.py
"""
Global hazard sources → HazardEvent.

Sources:
  - NASA EONET: open natural events (wildfires, storms, floods, volcanoes, ...)
  - USGS: past-hour earthquake summary (GeoJSON FeatureCollection)
  - OpenFEMA: recent US disaster declarations (state code only, no geometry)

Each source is a SourceAdapter; see sources.py for the failure contract.
Ids are "<prefix>-<native id>" (eonet-, usgs-, fema-), so repeated records
from one source dedupe on merge while sources never collide with each other.
"""
from __future__ import annotations

import random
import re
from functools import partial
from typing import Any, Dict, List, Optional

import httpx

from climateglobe.core.contracts import GeoPoint, HazardEvent
from climateglobe.core.geo_registry import jittered_state_point
from climateglobe.core.geometry import normalize_point, ring_vertices
from climateglobe.core.geomath import spherical_centroid
from climateglobe.core.keying import namespaced_id
from climateglobe.core.settings import settings
from climateglobe.core.time import days_ago_date, epoch_ms_to_iso, iso_or_now
from climateglobe.services.classify import (
    EONET_CATEGORY_RULES,
    category_for,
    clamp_intensity,
    coerce_float,
    magnitude_severity,
    severity_for,
    severity_intensity,
)
from climateglobe.services.sources import SourceAdapter, map_records, require_list


# ══════════════════════════════════════════════════════════════
# Shared helpers
# ══════════════════════════════════════════════════════════════

_STORM_PREFIX_RE = re.compile(r"^(severe\s*storms\s*-\s*)", re.IGNORECASE)
_TRAILING_PAREN_RE = re.compile(r"\s*\([^)]*\)\s*$")
_MULTISPACE_RE = re.compile(r"\s{2,}")


def clean_event_title(raw: Any) -> str:
    """
    Display title for an EONET event.

    >>> clean_event_title("Severe Storms -  Tropical Cyclone Alfred (Australia)")
    'Tropical Cyclone Alfred'
    """
    t = "" if raw is None else str(raw).strip()
    t = _STORM_PREFIX_RE.sub("", t).strip()
    t = _TRAILING_PAREN_RE.sub("", t).strip()
    t = _MULTISPACE_RE.sub(" ", t)
    return t or "Unnamed Event"


def _representative_point(coords: Any) -> Optional[GeoPoint]:
    """Polygon → spherical centroid of its first ring; anything else → first pair."""
    ring = ring_vertices(coords)
    if len(ring) >= 3:
        c = spherical_centroid(ring)
        if c is not None:
            return c
    return normalize_point(coords)


# ══════════════════════════════════════════════════════════════
# NASA EONET
# ══════════════════════════════════════════════════════════════

def _eonet_event(ev: Any) -> Optional[HazardEvent]:
    if not isinstance(ev, dict):
        return None

    geometries = ev.get("geometry")
    if not isinstance(geometries, list) or not geometries:
        return None
    # Observations are chronological: the marker sits at the latest one,
    # detectedAt is the first.
    first, latest = geometries[0], geometries[-1]
    if not isinstance(latest, dict):
        return None

    pt = _representative_point(latest.get("coordinates"))
    if pt is None:
        return None

    cats = ev.get("categories") or []
    cat_title = ""
    if isinstance(cats, list) and cats and isinstance(cats[0], dict):
        cat_title = str(cats[0].get("title") or "")
    category = category_for(cat_title, EONET_CATEGORY_RULES)

    # Crude proxy: long-running events accumulate more observations
    intensity = clamp_intensity(len(geometries), 1.0, 10.0)

    desc = ev.get("description")

    return HazardEvent(
        id=namespaced_id("eonet", ev.get("id"), fallback=ev.get("title")),
        title=clean_event_title(ev.get("title")),
        category=category,
        lat=pt.lat,
        lng=pt.lng,
        intensity=intensity,
        detectedAt=iso_or_now(first.get("date") if isinstance(first, dict) else None),
        source="NASA EONET",
        severity="Medium",
        description=str(desc) if desc else (cat_title or None),
    )


def _parse_eonet_events(payload: Any, *, limit: int) -> List[HazardEvent]:
    events = require_list("eonet", payload, "events")
    return map_records("eonet", events[:limit], _eonet_event)


class EonetSource(SourceAdapter[HazardEvent]):
    name = "eonet"

    def __init__(self, *, base_url: Optional[str] = None, limit: Optional[int] = None, **kw):
        super().__init__(**kw)
        self.base_url = (base_url or settings.eonet_base_url).rstrip("/")
        self.limit = int(settings.eonet_limit if limit is None else limit)

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            "GET",
            f"{self.base_url}/events",
            params={"status": "open", "limit": str(self.limit)},
            headers=self.headers(),
        )

    def parse(self, payload: Any) -> List[HazardEvent]:
        return _parse_eonet_events(payload, limit=self.limit)


# ══════════════════════════════════════════════════════════════
# USGS earthquakes (GeoJSON)
# ══════════════════════════════════════════════════════════════

def _usgs_feature(f: Any) -> Optional[HazardEvent]:
    if not isinstance(f, dict):
        return None
    props = f.get("properties")
    if not isinstance(props, dict):
        props = {}
    geom = f.get("geometry")
    if not isinstance(geom, dict):
        return None

    # [lon, lat, depth_km]
    pt = normalize_point(geom.get("coordinates"))
    if pt is None:
        return None

    mag = coerce_float(props.get("mag"), 0.0)
    place = str(props.get("place") or "").strip() or "Unknown location"

    return HazardEvent(
        id=namespaced_id("usgs", f.get("id"), fallback=[pt.lat, pt.lng, props.get("time")]),
        title=place,
        category="Earthquake",
        lat=pt.lat,
        lng=pt.lng,
        intensity=clamp_intensity(mag),
        detectedAt=epoch_ms_to_iso(props.get("time")) or iso_or_now(None),
        source="USGS",
        severity=magnitude_severity(mag),
        description=f"Magnitude {mag:g}",
    )


def _parse_usgs_features(payload: Any, *, limit: int) -> List[HazardEvent]:
    features = require_list("usgs", payload, "features")
    return map_records("usgs", features[:limit], _usgs_feature)


class UsgsSource(SourceAdapter[HazardEvent]):
    name = "usgs"

    def __init__(self, *, base_url: Optional[str] = None, limit: Optional[int] = None, **kw):
        super().__init__(**kw)
        self.base_url = (base_url or settings.usgs_base_url).rstrip("/")
        self.limit = int(settings.usgs_max_records if limit is None else limit)

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            "GET",
            f"{self.base_url}/summary/all_hour.geojson",
            headers=self.headers(),
        )

    def parse(self, payload: Any) -> List[HazardEvent]:
        return _parse_usgs_features(payload, limit=self.limit)


# ══════════════════════════════════════════════════════════════
# OpenFEMA disaster declarations
# ══════════════════════════════════════════════════════════════

_FEMA_SELECT = ",".join(
    [
        "disasterNumber",
        "declarationDate",
        "disasterName",
        "incidentType",
        "state",
        "declarationType",
        "incidentBeginDate",
        "incidentEndDate",
        "designatedArea",
        "placeCode",
    ]
)


def _fema_declaration(
    row: Any, *, jitter_deg: float, rng: Optional[random.Random] = None
) -> Optional[HazardEvent]:
    if not isinstance(row, dict):
        return None
    number = row.get("disasterNumber")
    if number is None:
        return None

    # No geometry: state reference point + cosmetic jitter
    state = str(row.get("state") or "")
    pt = jittered_state_point(state, jitter_deg=jitter_deg, rng=rng)
    if pt is None:
        return None

    incident = str(row.get("incidentType") or "Unknown")
    severity = severity_for(incident)
    area = str(row.get("designatedArea") or "").strip()
    decl_type = str(row.get("declarationType") or "").strip()
    name = str(row.get("disasterName") or "").strip() or "Unnamed Disaster"

    desc_parts: List[str] = [incident]
    if area:
        desc_parts.append(f"{area}, {state}")
    if decl_type:
        desc_parts.append(f"Declaration: {decl_type}")

    return HazardEvent(
        id=namespaced_id("fema", number),
        title=name,
        category=category_for(incident),
        lat=pt.lat,
        lng=pt.lng,
        intensity=severity_intensity(severity),
        detectedAt=iso_or_now(row.get("declarationDate")),
        source="FEMA",
        severity=severity,
        description=". ".join(desc_parts),
    )


def _parse_fema_declarations(
    payload: Any,
    *,
    limit: int,
    jitter_deg: float,
    rng: Optional[random.Random] = None,
) -> List[HazardEvent]:
    rows = require_list("fema", payload, "DisasterDeclarationsSummaries")
    return map_records(
        "fema", rows[:limit], partial(_fema_declaration, jitter_deg=jitter_deg, rng=rng)
    )


class FemaSource(SourceAdapter[HazardEvent]):
    name = "fema"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        limit: Optional[int] = None,
        lookback_days: Optional[int] = None,
        jitter_deg: Optional[float] = None,
        rng: Optional[random.Random] = None,
        **kw,
    ):
        super().__init__(**kw)
        self.base_url = (base_url or settings.fema_base_url).rstrip("/")
        self.limit = int(settings.fema_max_records if limit is None else limit)
        self.lookback_days = int(settings.fema_lookback_days if lookback_days is None else lookback_days)
        self.jitter_deg = float(settings.fema_jitter_deg if jitter_deg is None else jitter_deg)
        self.rng = rng

    def query_params(self) -> Dict[str, str]:
        cutoff = days_ago_date(self.lookback_days)
        return {
            "$filter": f"declarationDate ge '{cutoff}'",
            "$orderby": "declarationDate desc",
            "$top": str(self.limit),
            "$select": _FEMA_SELECT,
        }

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            "GET",
            f"{self.base_url}/DisasterDeclarationsSummaries",
            params=self.query_params(),
            headers=self.headers(),
        )

    def parse(self, payload: Any) -> List[HazardEvent]:
        return _parse_fema_declarations(
            payload, limit=self.limit, jitter_deg=self.jitter_deg, rng=self.rng
        )


def default_hazard_sources() -> List[SourceAdapter[HazardEvent]]:
    return [EonetSource(), UsgsSource(), FemaSource()]
