import httpx
import pytest
from fastapi.testclient import TestClient

from climateglobe.api import overlay as overlay_api
from climateglobe.main import app
from climateglobe.services.aggregator import Aggregator
from climateglobe.services.hazards import FemaSource, UsgsSource
from climateglobe.services.infrastructure import OverpassInfrastructureSource


@pytest.fixture
def client(mock_client, fixture_json):
    routes = {
        "all_hour.geojson": (502, {"error": "bad gateway"}),
        "DisasterDeclarationsSummaries": (200, fixture_json("fema.json")),
        "interpreter": (200, fixture_json("overpass.json")),
        "forecast": (200, {"current": {"wind_speed_10m": 10.0, "wind_direction_10m": 180.0}}),
    }
    agg = Aggregator(
        hazard_sources=[
            UsgsSource(base_url="https://usgs.test/feed"),
            FemaSource(base_url="https://fema.test/v2"),
        ],
        infrastructure_sources=[OverpassInfrastructureSource(url="https://overpass.test/api/interpreter")],
        environmental_sources=[],
        client_factory=lambda: mock_client(routes),
    )
    previous = app.dependency_overrides.get(overlay_api.get_aggregator)
    app.dependency_overrides[overlay_api.get_aggregator] = lambda: agg
    app.dependency_overrides[overlay_api.get_http_client] = lambda: mock_client(routes)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(overlay_api.get_http_client, None)
        if previous is not None:
            app.dependency_overrides[overlay_api.get_aggregator] = previous


def test_health(client) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_overlay_points(client) -> None:
    r = client.get("/overlay")
    assert r.status_code == 200
    points = r.json()
    # 2 FEMA declarations + 4 OSM sites; USGS failed
    assert len(points) == 6
    assert [p["kind"] for p in points].count("hazard") == 2
    assert all(p["size"] > 0 and p["color"].startswith("#") for p in points)


def test_overlay_raw_reports_warnings(client) -> None:
    r = client.get("/overlay/raw")
    assert r.status_code == 200
    body = r.json()
    assert [h["id"] for h in body["hazards"]] == ["fema-4856", "fema-4857"]
    assert len(body["infrastructure"]) == 4
    assert body["warnings"] == ["usgs transport_failure: HTTP 502"]


def test_path_with_explicit_wind(client) -> None:
    r = client.post(
        "/overlay/path",
        json={"lat": 0.0, "lng": 0.0, "bearing_deg": 90.0, "speed_kmh": 10.0, "hours": 12, "step_hours": 6},
    )
    assert r.status_code == 200
    body = r.json()
    assert [p["hours_ahead"] for p in body["points"]] == [6.0, 12.0]
    assert body["storm_likely"] is None
    assert body["points"][-1]["lng"] > 0
    assert "not a meteorological forecast" in body["disclaimer"].lower()


def test_path_uses_observed_wind(client) -> None:
    r = client.post("/overlay/path", json={"lat": 10.0, "lng": 10.0, "hours": 6, "step_hours": 6})
    assert r.status_code == 200
    body = r.json()
    # wind from the south (180) travels north
    assert body["bearing_deg"] == 0.0
    assert body["points"][0]["lat"] > 10.0
    assert body["storm_likely"] is False


def test_path_rejects_bad_coordinates(client) -> None:
    r = client.post("/overlay/path", json={"lat": 95.0, "lng": 0.0})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "bad_path_request"


def test_path_weather_unavailable(client, mock_client) -> None:
    app.dependency_overrides[overlay_api.get_http_client] = lambda: mock_client(
        {"forecast": httpx.ConnectError("down")}
    )
    r = client.post("/overlay/path", json={"lat": 10.0, "lng": 10.0})
    assert r.status_code == 503
    assert r.json()["detail"]["code"] == "weather_unavailable"
