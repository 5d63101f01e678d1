"""
Open-Meteo point weather (keyless).

Only what path projection and the storm heuristic need: current wind plus the
hourly/daily gust, precipitation-probability and weather-code series.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from climateglobe.core.contracts import PointWeather
from climateglobe.core.errors import Err, Ok, Result, SchemaMismatch, TransportFailure
from climateglobe.core.settings import settings
from climateglobe.services.classify import coerce_float

logger = logging.getLogger(__name__)

_CURRENT_FIELDS = [
    "temperature_2m",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
    "wind_gusts_10m",
    "wind_direction_10m",
]
_HOURLY_FIELDS = [
    "precipitation_probability",
    "wind_speed_10m",
    "wind_gusts_10m",
]
_DAILY_FIELDS = [
    "weather_code",
    "wind_speed_10m_max",
    "wind_gusts_10m_max",
]


def _opt_float(x: Any) -> Optional[float]:
    if x is None:
        return None
    f = coerce_float(x, float("nan"))
    return None if f != f else f


def _series(block: Any, fields: List[str]) -> Dict[str, List[Any]]:
    if not isinstance(block, dict):
        return {}
    out: Dict[str, List[Any]] = {}
    for k in fields:
        v = block.get(k)
        if isinstance(v, list):
            out[k] = v
    return out


def parse_point_weather(payload: Any, *, lat: float, lng: float) -> PointWeather:
    if not isinstance(payload, dict):
        raise SchemaMismatch("open_meteo", "expected JSON object")
    # legacy responses use current_weather/windspeed/winddirection
    cur = payload.get("current") or payload.get("current_weather") or {}
    if not isinstance(cur, dict):
        cur = {}
    return PointWeather(
        lat=lat,
        lng=lng,
        wind_speed_kmh=_opt_float(cur.get("wind_speed_10m", cur.get("windspeed"))),
        wind_direction_deg=_opt_float(cur.get("wind_direction_10m", cur.get("winddirection"))),
        wind_gusts_kmh=_opt_float(cur.get("wind_gusts_10m")),
        hourly=_series(payload.get("hourly"), _HOURLY_FIELDS),
        daily=_series(payload.get("daily"), _DAILY_FIELDS),
    )


async def fetch_point_weather(
    client: httpx.AsyncClient,
    lat: float,
    lng: float,
    *,
    url: Optional[str] = None,
) -> Result[PointWeather]:
    params = {
        "latitude": str(lat),
        "longitude": str(lng),
        "timezone": "auto",
        "wind_speed_unit": "kmh",
        "current": ",".join(_CURRENT_FIELDS),
        "hourly": ",".join(_HOURLY_FIELDS),
        "daily": ",".join(_DAILY_FIELDS),
    }
    try:
        r = await client.get(
            url or settings.open_meteo_url,
            params=params,
            headers={"User-Agent": settings.user_agent},
        )
    except httpx.HTTPError as e:
        return Err(TransportFailure("open_meteo", f"{type(e).__name__}: {e}"))

    if r.status_code != 200:
        return Err(TransportFailure("open_meteo", f"HTTP {r.status_code}", status_code=r.status_code))

    try:
        return Ok(parse_point_weather(r.json(), lat=lat, lng=lng))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        return Err(SchemaMismatch("open_meteo", str(e)))
    except SchemaMismatch as e:
        return Err(e)


def _any_at_least(values: Any, threshold: float) -> bool:
    if not isinstance(values, list):
        return False
    for v in values:
        f = _opt_float(v)
        if f is not None and f >= threshold:
            return True
    return False


def is_storm_forecast(
    weather: Optional[PointWeather],
    *,
    gust_threshold: float = 72.0,
    precip_prob_threshold: float = 60.0,
) -> bool:
    """
    True when the forecast looks stormy:
      - any daily max gust or hourly gust >= gust_threshold (km/h, ~20 m/s)
      - any hourly precipitation probability >= precip_prob_threshold (%)
      - any daily weather code in the thunderstorm range 95..99
    """
    if weather is None:
        return False
    if _any_at_least(weather.daily.get("wind_gusts_10m_max"), gust_threshold):
        return True
    if _any_at_least(weather.hourly.get("wind_gusts_10m"), gust_threshold):
        return True
    if _any_at_least(weather.hourly.get("precipitation_probability"), precip_prob_threshold):
        return True
    for code in weather.daily.get("weather_code") or []:
        c = _opt_float(code)
        if c is not None and 95 <= c <= 99:
            return True
    return False
