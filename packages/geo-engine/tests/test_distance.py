import pytest

from geo_engine.distance import haversine_distance_km, haversine_distance_meters
from geo_engine.models import GeoPoint


def test_haversine_distance_is_zero_for_same_point() -> None:
    point = GeoPoint(lat=51.5074, lng=-0.1278)
    assert haversine_distance_km(point, point) == 0.0
    assert haversine_distance_meters(point, point) == 0.0


def test_haversine_distance_is_symmetric() -> None:
    london = GeoPoint(lat=51.5074, lng=-0.1278)
    didsbury = GeoPoint(lat=53.4351, lng=-2.2899)
    assert haversine_distance_km(london, didsbury) == pytest.approx(haversine_distance_km(didsbury, london))


def test_haversine_distance_london_to_manchester() -> None:
    london = GeoPoint(lat=51.5074, lng=-0.1278)
    manchester = GeoPoint(lat=53.4808, lng=-2.2426)
    distance = haversine_distance_km(london, manchester)
    assert 255 < distance < 265


def test_meters_and_km_agree() -> None:
    hyde_park = GeoPoint(lat=51.5073, lng=-0.1657)
    regents_park = GeoPoint(lat=51.5313, lng=-0.1570)
    km = haversine_distance_km(hyde_park, regents_park)
    assert haversine_distance_meters(hyde_park, regents_park) == pytest.approx(km * 1000)


def test_geo_point_parse_rejects_non_numeric_values() -> None:
    assert GeoPoint.parse("51.5", "-0.12") == GeoPoint(lat=51.5, lng=-0.12)
    assert GeoPoint.parse(None, -0.12) is None
    assert GeoPoint.parse("abc", 1) is None
    assert GeoPoint.parse(float("nan"), 1) is None
    assert GeoPoint.parse(91, 0) is None
