import math

import pytest

from proxitour.core.geo import (
    GeoPoint,
    centroid,
    distance_m,
    format_distance,
    haversine_m,
    is_valid_coordinate,
)

TIMES_SQUARE = GeoPoint(lat=40.7580, lon=-73.9855)
EIFFEL_TOWER = GeoPoint(lat=48.8584, lon=2.2945)
MEXICO_CITY = GeoPoint(lat=19.3547, lon=-99.1625)


def test_distance_to_self_is_zero():
    assert haversine_m(TIMES_SQUARE, TIMES_SQUARE) == 0.0


def test_distance_is_symmetric():
    assert haversine_m(EIFFEL_TOWER, MEXICO_CITY) == pytest.approx(haversine_m(MEXICO_CITY, EIFFEL_TOWER))


def test_paris_to_mexico_city_is_about_9200_km():
    d = haversine_m(EIFFEL_TOWER, MEXICO_CITY)
    assert 9_100_000 < d < 9_300_000


def test_one_degree_of_latitude_is_about_111_km():
    assert distance_m(0.0, 10.0, 1.0, 10.0) == pytest.approx(111_195, rel=1e-3)


def test_antipodal_points_do_not_raise():
    d = haversine_m(GeoPoint(lat=0.0, lon=0.0), GeoPoint(lat=0.0, lon=180.0))
    assert d == pytest.approx(math.pi * 6_371_000)


def test_nan_propagates():
    assert math.isnan(haversine_m(GeoPoint(lat=math.nan, lon=0.0), TIMES_SQUARE))
    assert math.isnan(haversine_m(GeoPoint(lat=math.inf, lon=0.0), TIMES_SQUARE))


def test_out_of_range_finite_input_is_left_to_the_validity_check():
    d = haversine_m(GeoPoint(lat=95.0, lon=0.0), GeoPoint(lat=0.0, lon=0.0))
    assert math.isfinite(d)
    assert not is_valid_coordinate(95.0, 0.0)


@pytest.mark.parametrize(
    "lat, lon, expected",
    [
        (40.758, -73.9855, True),
        (90.0, 180.0, True),
        (91.0, 0.5, False),
        (10.0, -181.0, False),
        (0.0, 0.0, False),
        (math.nan, 1.0, False),
        (None, 1.0, False),
    ],
)
def test_is_valid_coordinate(lat, lon, expected):
    assert is_valid_coordinate(lat, lon) is expected


def test_format_distance():
    assert format_distance(849.6) == "850 m"
    assert format_distance(1234) == "1.2 km"


def test_centroid():
    c = centroid([GeoPoint(lat=0.0, lon=0.0), GeoPoint(lat=2.0, lon=4.0)])
    assert c == GeoPoint(lat=1.0, lon=2.0)
    with pytest.raises(ValueError):
        centroid([])
