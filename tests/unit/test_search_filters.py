from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from showfinder.config import settings
from showfinder.features.show_search.domain import SearchFilters, build_pagination, has_features


def test_date_only_window_covers_whole_days():
    filters = SearchFilters.model_validate({"startDate": "2025-10-04", "endDate": "2025-10-05"})
    tz = ZoneInfo(settings.DEFAULT_TIMEZONE)

    start, end = filters.window()

    assert start == datetime(2025, 10, 4, 0, 0, tzinfo=tz)
    assert end == datetime.combine(date(2025, 10, 5), time.max, tzinfo=tz)


def test_default_window_is_today_plus_thirty_days():
    tz = ZoneInfo(settings.DEFAULT_TIMEZONE)
    today = datetime.now(tz).date()

    start, end = SearchFilters().window()

    assert start.date() == today
    assert end.date() == today + timedelta(days=settings.SEARCH_DEFAULT_WINDOW_DAYS)


def test_datetime_bounds_are_kept():
    filters = SearchFilters.model_validate({"startDate": "2025-10-04T10:30:00-04:00"})

    start, _ = filters.window()

    assert isinstance(filters.start_date, datetime)
    assert start.hour == 10 and start.minute == 30


def test_end_before_start_is_invalid():
    with pytest.raises(ValidationError):
        SearchFilters.model_validate({"startDate": "2025-10-05", "endDate": "2025-10-04"})


def test_query_strings_are_coerced():
    filters = SearchFilters.model_validate(
        {
            "lat": "40.7",
            "long": "-74.0",
            "radiusMiles": "10",
            "maxEntryFee": "5",
            "categories": ["sports,pokemon", "magic"],
            "features": "parking",
            "page": "2",
            "pageSize": "5",
        }
    )

    assert filters.lng == -74.0
    assert filters.radius_miles == 10
    assert filters.categories == ["sports", "pokemon", "magic"]
    assert filters.features == ["parking"]
    assert filters.offset == 5


@pytest.mark.parametrize(
    "raw",
    [
        {"radiusMiles": "0"},
        {"lat": "91"},
        {"page": "0"},
        {"pageSize": "1000"},
        {"maxEntryFee": "-1"},
    ],
)
def test_out_of_range_filters_are_invalid(raw):
    with pytest.raises(ValidationError):
        SearchFilters.model_validate(raw)


def test_pagination_has_at_least_one_page():
    assert build_pagination(0, 20, 1) == {
        "totalCount": 0,
        "pageSize": 20,
        "currentPage": 1,
        "totalPages": 1,
    }
    assert build_pagination(41, 20, 3)["totalPages"] == 3


def test_has_features_accepts_object_or_list():
    assert has_features({"parking": True, "food": False}, ["parking"])
    assert not has_features({"parking": True, "food": False}, ["food"])
    assert has_features(["parking", "wifi"], ["parking", "wifi"])
    assert not has_features(None, ["parking"])
    assert has_features(None, [])


@pytest.mark.parametrize("raw", [{"lat": "40.7"}, {"lng": "-74.0"}])
def test_center_needs_both_coordinates(raw):
    with pytest.raises(ValidationError):
        SearchFilters.model_validate(raw)
