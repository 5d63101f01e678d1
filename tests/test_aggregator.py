import asyncio
from typing import Any, List, Optional

import httpx

from climateglobe.core.contracts import HazardEvent, InfrastructureSite
from climateglobe.core.errors import Err, Ok, TransportFailure
from climateglobe.services.aggregator import Aggregator
from climateglobe.services.hazards import FemaSource, UsgsSource
from climateglobe.services.sources import SourceAdapter


def _hazard(prefix: str, n: int) -> HazardEvent:
    return HazardEvent(
        id=f"{prefix}-{n}",
        title=f"{prefix} {n}",
        category="Flood",
        lat=10.0 + n,
        lng=20.0 + n,
        intensity=n,
        detectedAt="2025-03-01T00:00:00+00:00",
        source=prefix,
    )


class StaticSource(SourceAdapter[Any]):
    """Returns canned records without touching the network."""

    def __init__(self, name: str, records: Optional[List[Any]] = None, *, fail: bool = False):
        super().__init__()
        self.name = name
        self.records = records or []
        self.fail = fail

    def build_request(self, client):
        raise NotImplementedError

    def parse(self, payload):
        return payload

    async def fetch(self, client):
        if self.fail:
            return Err(TransportFailure(self.name, "HTTP 502", status_code=502))
        return Ok(list(self.records))


class ExplodingSource(StaticSource):
    async def fetch(self, client):
        raise RuntimeError("adapter bug")


def _no_network_client() -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request {request.url}")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _aggregator(hazards, infra=(), env=()) -> Aggregator:
    return Aggregator(
        hazard_sources=list(hazards),
        infrastructure_sources=list(infra),
        environmental_sources=list(env),
        client_factory=_no_network_client,
    )


def test_three_sources_one_failing_compose_five_points() -> None:
    agg = _aggregator(
        [
            StaticSource("eonet", [_hazard("eonet", 1), _hazard("eonet", 2)]),
            StaticSource("usgs", fail=True),
            StaticSource("fema", [_hazard("fema", 1), _hazard("fema", 2), _hazard("fema", 3)]),
        ]
    )
    snap = asyncio.run(agg.refresh())
    assert len(snap.overlay) == 5
    for p in snap.overlay:
        assert p.size > 0
        assert p.color.startswith("#") and len(p.color) == 7
    assert len(snap.warnings) == 1
    assert snap.warnings[0].startswith("usgs transport_failure")


def test_seismic_transport_failure_keeps_declarations(mock_client, fixture_json) -> None:
    routes = {
        "all_hour.geojson": httpx.ConnectError("unreachable"),
        "DisasterDeclarationsSummaries": (200, fixture_json("fema.json")),
    }
    agg = Aggregator(
        hazard_sources=[
            UsgsSource(base_url="https://usgs.test/feed"),
            FemaSource(base_url="https://fema.test/v2"),
        ],
        infrastructure_sources=[],
        environmental_sources=[],
        client_factory=lambda: mock_client(routes),
    )
    snap = asyncio.run(agg.refresh())
    assert [h.id for h in snap.hazards] == ["fema-4856", "fema-4857"]
    assert any(w.startswith("usgs") for w in snap.warnings)


def test_adapter_exception_does_not_reject_cycle() -> None:
    agg = _aggregator(
        [ExplodingSource("eonet"), StaticSource("fema", [_hazard("fema", 1)])]
    )
    snap = asyncio.run(agg.refresh())
    assert [h.id for h in snap.hazards] == ["fema-1"]
    assert "eonet crashed" in snap.warnings[0]


def test_all_sources_failing_yields_empty_snapshot() -> None:
    agg = _aggregator([StaticSource("eonet", fail=True)], [StaticSource("osm", fail=True)])
    snap = asyncio.run(agg.refresh())
    assert snap.hazards == []
    assert snap.infrastructure == []
    assert snap.overlay == []
    assert len(snap.warnings) == 2


def test_merges_hazards_and_infrastructure() -> None:
    site = InfrastructureSite(
        id="osm-1",
        name="Pier",
        type="Port",
        lat=1.0,
        lng=1.0,
        lastUpdated="2025-03-01T00:00:00+00:00",
    )
    agg = _aggregator(
        [StaticSource("eonet", [_hazard("eonet", 1)]), StaticSource("eonet2", [_hazard("eonet", 1)])],
        [StaticSource("osm", [site, site])],
    )
    snap = asyncio.run(agg.refresh())
    assert [h.id for h in snap.hazards] == ["eonet-1"]
    assert [s.id for s in snap.infrastructure] == ["osm-1"]
    assert [p.kind for p in snap.overlay] == ["hazard", "infrastructure"]


def test_stale_cycle_is_discarded() -> None:
    agg = _aggregator([StaticSource("eonet", [_hazard("eonet", 1)])])

    async def go():
        old_cycle = agg.next_cycle()
        new_snap = await agg.collect()
        assert agg.apply(new_snap)
        stale = await agg.collect(cycle=old_cycle)
        assert not agg.apply(stale)
        return new_snap

    new_snap = asyncio.run(go())
    assert agg.latest is new_snap


class SlowFirstSource(StaticSource):
    """First call is slow and returns eonet-1; later calls are fast and return eonet-2."""

    def __init__(self):
        super().__init__("eonet")
        self.calls = 0

    async def fetch(self, client):
        self.calls += 1
        if self.calls == 1:
            await asyncio.sleep(0.05)
            return Ok([_hazard("eonet", 1)])
        return Ok([_hazard("eonet", 2)])


def test_superseded_refresh_returns_newer_snapshot() -> None:
    agg = _aggregator([SlowFirstSource()])

    async def go():
        first = asyncio.create_task(agg.refresh())
        # let the first cycle get its source call in flight
        await asyncio.sleep(0.01)
        second = await agg.refresh()
        first_result = await first
        return first_result, second

    first_result, second = asyncio.run(go())
    assert second.cycle == 2
    # the first refresh landed after cycle 2 and must not replace it
    assert agg.latest.cycle == 2
    assert first_result.cycle == 2
    assert [h.id for h in agg.latest.hazards] == ["eonet-2"]


def test_overlay_and_raw_contracts() -> None:
    agg = _aggregator([StaticSource("fema", [_hazard("fema", 1)])])
    points = asyncio.run(agg.overlay())
    assert len(points) == 1
    raw = asyncio.run(agg.raw())
    assert [h.id for h in raw.hazards] == ["fema-1"]
    assert raw.infrastructure == []
