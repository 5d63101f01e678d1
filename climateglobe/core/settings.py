from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    user_agent: str = Field(default="climateglobe/1.0", alias="USER_AGENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Versioning
    algo_version: str = Field(default="overlay.v1.multisource", alias="ALGO_VERSION")

    # ──────────────────────────────────────────────────────────────
    # Aggregation: shared config
    # ──────────────────────────────────────────────────────────────

    overlays_timeout_s: float = Field(default=15.0, alias="OVERLAYS_TIMEOUT_S")

    # ──────────────────────────────────────────────────────────────
    # NASA EONET: open natural events (no auth)
    # ──────────────────────────────────────────────────────────────

    eonet_base_url: str = Field(
        default="https://eonet.gsfc.nasa.gov/api/v3",
        alias="EONET_BASE_URL",
    )
    eonet_limit: int = Field(default=100, alias="EONET_LIMIT")

    # ──────────────────────────────────────────────────────────────
    # USGS: past-hour earthquake summary (GeoJSON, no auth)
    # ──────────────────────────────────────────────────────────────

    usgs_base_url: str = Field(
        default="https://earthquake.usgs.gov/earthquakes/feed/v1.0",
        alias="USGS_BASE_URL",
    )
    usgs_max_records: int = Field(default=200, alias="USGS_MAX_RECORDS")

    # ──────────────────────────────────────────────────────────────
    # OpenFEMA: disaster declaration summaries (no auth)
    # Declarations carry a state code only; see geo_registry.
    # ──────────────────────────────────────────────────────────────

    fema_base_url: str = Field(
        default="https://www.fema.gov/api/open/v2",
        alias="FEMA_BASE_URL",
    )
    fema_max_records: int = Field(default=100, alias="FEMA_MAX_RECORDS")
    fema_lookback_days: int = Field(default=180, alias="FEMA_LOOKBACK_DAYS")
    fema_jitter_deg: float = Field(default=0.5, alias="FEMA_JITTER_DEG")

    # ──────────────────────────────────────────────────────────────
    # OpenAQ: latest air quality measurements
    # ──────────────────────────────────────────────────────────────

    openaq_base_url: str = Field(
        default="https://api.openaq.org/v2",
        alias="OPENAQ_BASE_URL",
    )
    openaq_limit: int = Field(default=120, alias="OPENAQ_LIMIT")

    # ──────────────────────────────────────────────────────────────
    # Overpass: critical infrastructure nodes (OSM)
    # Bbox is south,west,north,east (Overpass order).
    # ──────────────────────────────────────────────────────────────

    overpass_url: str = Field(default="https://overpass-api.de/api/interpreter", alias="OVERPASS_URL")
    overpass_timeout_s: int = Field(default=25, alias="OVERPASS_TIMEOUT_S")
    overpass_bbox: str = Field(default="40,-130,60,-60", alias="OVERPASS_BBOX")
    overpass_max_elements: int = Field(default=60, alias="OVERPASS_MAX_ELEMENTS")

    # ──────────────────────────────────────────────────────────────
    # Open-Meteo: point weather for path projection
    # ──────────────────────────────────────────────────────────────

    open_meteo_url: str = Field(
        default="https://api.open-meteo.com/v1/forecast",
        alias="OPEN_METEO_URL",
    )
    path_hours: int = Field(default=24, alias="PATH_HOURS")
    path_step_hours: int = Field(default=6, alias="PATH_STEP_HOURS")


settings = Settings()
