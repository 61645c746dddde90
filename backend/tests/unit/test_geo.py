import math

import pytest

from foodshare.utils.geo import filter_within_radius, format_distance, haversine_km, sort_by_distance

NYC = (40.7128, -74.0060)
LONDON = (51.5074, -0.1278)
BROOKLYN = (40.6782, -73.9442)


def test_distance_to_same_point_is_zero():
    assert haversine_km(*NYC, *NYC) == 0.0


def test_distance_is_symmetric():
    assert haversine_km(*NYC, *LONDON) == pytest.approx(haversine_km(*LONDON, *NYC))


def test_known_distance_new_york_london():
    assert haversine_km(*NYC, *LONDON) == pytest.approx(5570, rel=0.01)


def test_nan_propagates():
    assert math.isnan(haversine_km(float("nan"), 0.0, 0.0, 0.0))


def test_format_distance_switches_to_km():
    assert format_distance(0.4567) == "457m"
    assert format_distance(3.14159) == "3.1km"


def test_filter_and_sort_by_distance():
    points = {"london": LONDON, "brooklyn": BROOKLYN, "nyc": NYC}
    position = points.get

    near = filter_within_radius(points, *NYC, 20, position=position)
    assert {name for name, _ in near} == {"brooklyn", "nyc"}

    ordered = [name for name, _ in sort_by_distance(points, *NYC, position=position)]
    assert ordered == ["nyc", "brooklyn", "london"]
