import pytest

from climateglobe.core.geomath import destination_point, haversine_km, spherical_centroid


def test_square_centroid_near_five_five() -> None:
    c = spherical_centroid([(0, 0), (0, 10), (10, 10), (10, 0)])
    assert c is not None
    assert c.lat == pytest.approx(5.0, abs=0.1)
    assert c.lng == pytest.approx(5.0, abs=0.1)


def test_centroid_across_antimeridian() -> None:
    c = spherical_centroid([(179.0, -1.0), (-179.0, -1.0), (-179.0, 1.0), (179.0, 1.0)])
    assert c is not None
    assert abs(c.lng) == pytest.approx(180.0, abs=0.01)
    assert c.lat == pytest.approx(0.0, abs=0.01)


def test_centroid_degenerate_is_none() -> None:
    assert spherical_centroid([]) is None
    # antipodal pair: mean vector is zero
    assert spherical_centroid([(0.0, 0.0), (180.0, 0.0)]) is None


def test_destination_east_along_equator() -> None:
    p = destination_point(0.0, 0.0, 90.0, 111.0)
    assert p.lat == pytest.approx(0.0, abs=1e-6)
    assert p.lng == pytest.approx(1.0, abs=0.01)


def test_destination_north() -> None:
    p = destination_point(10.0, 20.0, 0.0, 111.195)
    assert p.lat == pytest.approx(11.0, abs=0.01)
    assert p.lng == pytest.approx(20.0, abs=1e-6)


def test_destination_wraps_longitude() -> None:
    p = destination_point(0.0, 179.5, 90.0, 111.195)
    assert p.lng == pytest.approx(-179.5, abs=0.01)


def test_haversine_one_degree_on_equator() -> None:
    assert haversine_km((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111.19, abs=0.05)
    assert haversine_km((45.0, 45.0), (45.0, 45.0)) == 0.0
