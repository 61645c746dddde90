from datetime import datetime, timedelta, timezone

import pytest

from foodshare.core.errors import InvalidInput
from foodshare.utils.validators import (
    require_text,
    validate_coordinates,
    validate_pickup_window,
    validate_radius,
)

NOW = datetime(2025, 3, 1, 12, 0)


def test_require_text_strips_and_rejects_blank():
    assert require_text("  soup ", "Food item") == "soup"
    with pytest.raises(InvalidInput, match="Food item is required"):
        require_text("   ", "Food item")


@pytest.mark.parametrize(
    "lat,lon",
    [(91, 0), (-91, 0), (0, 181), (0, -180.5), (float("nan"), 0), ("abc", 0)],
)
def test_validate_coordinates_rejects_out_of_range(lat, lon):
    with pytest.raises(InvalidInput):
        validate_coordinates(lat, lon)


def test_validate_coordinates_accepts_bounds():
    validate_coordinates(90, -180)
    validate_coordinates(-90, 180)


def test_pickup_window_must_end_after_start():
    with pytest.raises(InvalidInput, match="after"):
        validate_pickup_window(NOW + timedelta(hours=2), NOW + timedelta(hours=1), NOW)


def test_pickup_window_must_start_in_future():
    with pytest.raises(InvalidInput, match="future"):
        validate_pickup_window(NOW, NOW + timedelta(hours=1), NOW)


def test_pickup_window_normalizes_aware_times_to_naive_utc():
    start = datetime(2025, 3, 1, 15, 0, tzinfo=timezone(timedelta(hours=2)))
    end = start + timedelta(hours=2)
    s, e = validate_pickup_window(start, end, NOW)
    assert s == datetime(2025, 3, 1, 13, 0)
    assert e.tzinfo is None


def test_validate_radius():
    assert validate_radius(5) == 5.0
    with pytest.raises(InvalidInput):
        validate_radius(0)
