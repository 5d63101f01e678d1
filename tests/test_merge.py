from climateglobe.core.contracts import HazardEvent
from climateglobe.services.merge import merge


def _hazard(id_: str, title: str = "t", lat: float = 10.0, lng: float = 20.0) -> HazardEvent:
    return HazardEvent(
        id=id_,
        title=title,
        category="Storm",
        lat=lat,
        lng=lng,
        intensity=3,
        detectedAt="2025-03-01T00:00:00+00:00",
        source=id_.split("-", 1)[0],
    )


def test_same_id_collapses_last_writer_wins() -> None:
    a = _hazard("usgs-1", title="first")
    b = _hazard("usgs-1", title="second")
    merged = merge([a, b])
    assert len(merged) == 1
    assert merged[0].title == "second"


def test_different_prefixes_same_coords_coexist() -> None:
    a = _hazard("eonet-1")
    b = _hazard("fema-1")
    merged = merge([a], [b])
    assert [h.id for h in merged] == ["eonet-1", "fema-1"]


def test_order_is_first_occurrence() -> None:
    merged = merge(
        [_hazard("eonet-1", "a"), _hazard("eonet-2", "b")],
        [_hazard("eonet-1", "c"), _hazard("usgs-9", "d")],
    )
    assert [h.id for h in merged] == ["eonet-1", "eonet-2", "usgs-9"]
    assert merged[0].title == "c"


def test_merge_empty() -> None:
    assert merge() == []
    assert merge([], []) == []
