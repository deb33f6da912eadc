import math

import pytest

from showfinder.features.show_review.priority import adjust_priority
from showfinder.utils.geo import bounding_box, haversine_miles, is_sentinel, is_valid_coordinate


@pytest.mark.parametrize(
    ("score", "delta", "expected"),
    [
        (50, 2, 52),
        (99, 2, 100),
        (100, 2, 100),
        (1, -3, 0),
        (0, -3, 0),
        (40, -3, 37),
    ],
)
def test_adjust_priority_clamps_to_range(score, delta, expected):
    assert adjust_priority(score, delta) == expected


def test_haversine_known_distance():
    # New York City to Philadelphia is roughly 80 miles
    distance = haversine_miles(40.7128, -74.0060, 39.9526, -75.1652)

    assert 78 < distance < 82
    assert haversine_miles(40.0, -75.0, 40.0, -75.0) == 0


@pytest.mark.parametrize(
    ("lat", "lng", "expected"),
    [
        (40.7, -74.0, True),
        (0.0, 0.0, False),
        (None, -74.0, False),
        (91.0, 0.5, False),
        (45.0, 181.0, False),
        (math.nan, 10.0, False),
        (True, 10.0, False),
        (0.0, 10.0, True),
    ],
)
def test_is_valid_coordinate(lat, lng, expected):
    assert is_valid_coordinate(lat, lng) is expected


def test_sentinel_means_no_location():
    assert is_sentinel(0.0, 0.0)
    assert is_sentinel(0.05, -0.05)
    assert is_sentinel(None, None)
    assert not is_sentinel(0.05, 12.0)
    assert not is_sentinel(40.7, -74.0)


def test_bounding_box_contains_radius():
    min_lat, max_lat, min_lng, max_lng = bounding_box(40.0, -75.0, 25)

    assert min_lat < 40.0 < max_lat
    assert min_lng < -75.0 < max_lng
    # A point 25 miles due north sits on the box edge
    assert haversine_miles(40.0, -75.0, max_lat, -75.0) == pytest.approx(25, rel=1e-6)
