from datetime import datetime
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest

from showfinder.db.helpers import DatabaseError
from showfinder.features.show_search.domain import ParticipatingDealer, select_dealers
from showfinder.features.show_search.repository import ShowQueryRepository
from showfinder.features.show_search.services import ShowSearchService

TZ = ZoneInfo("America/New_York")
SHOW_ID = "6f1c2b9e-1d6a-4a7e-9a51-3f0f4b8a2c11"
ORGANIZER_ID = "0b7d6c0e-5a7f-4d3f-8d8e-2b8f7f6b1a22"


def _show(show_id, day, lat=None, lng=None, **extra):
    row = {
        "id": show_id,
        "title": f"Show {show_id}",
        "start_date": datetime(2025, 10, day, 9, tzinfo=TZ),
        "end_date": datetime(2025, 10, day, 17, tzinfo=TZ),
        "latitude": lat,
        "longitude": lng,
        "status": "ACTIVE",
        "features": {},
        "categories": [],
    }
    row.update(extra)
    return row


@pytest.fixture
def candidates(monkeypatch):
    def _install(rows):
        mock = AsyncMock(return_value=rows)
        monkeypatch.setattr(ShowQueryRepository, "fetch_candidates", mock)
        return mock

    return _install


@pytest.mark.asyncio
async def test_sentinel_location_searches_everywhere(candidates):
    fetch = candidates(
        [
            _show("a", 5, 34.05, -118.24),
            _show("b", 4),
        ]
    )

    result = await ShowSearchService().search(
        {"lat": "0", "lng": "0", "startDate": "2025-10-01", "endDate": "2025-10-31"}
    )

    assert [item["id"] for item in result["data"]] == ["b", "a"]
    assert all(item["distanceMiles"] is None for item in result["data"])
    assert fetch.await_args.kwargs["bounding_box"] is None
    assert result["pagination"]["totalCount"] == 2


@pytest.mark.asyncio
async def test_distance_filter_drops_far_and_unlocated_shows(candidates):
    candidates(
        [
            _show("near", 5, 40.75, -73.99),
            _show("far", 5, 34.05, -118.24),
            _show("nowhere", 5),
        ]
    )

    result = await ShowSearchService().search(
        {"lat": 40.7128, "lng": -74.0060, "radiusMiles": 25, "startDate": "2025-10-01", "endDate": "2025-10-31"}
    )

    assert [item["id"] for item in result["data"]] == ["near"]
    assert result["data"][0]["distanceMiles"] < 5


@pytest.mark.asyncio
async def test_same_day_shows_ordered_by_distance(candidates):
    candidates(
        [
            _show("farther", 5, 40.90, -74.00),
            _show("closer", 5, 40.72, -74.00),
        ]
    )

    result = await ShowSearchService().search(
        {"lat": 40.7128, "lng": -74.0060, "radiusMiles": 50, "startDate": "2025-10-01", "endDate": "2025-10-31"}
    )

    assert [item["id"] for item in result["data"]] == ["closer", "farther"]


@pytest.mark.asyncio
async def test_feature_filter_and_paging(candidates):
    candidates([_show(str(day), day, features={"parking": True}) for day in range(1, 6)] + [_show("x", 6)])

    result = await ShowSearchService().search(
        {"features": ["parking"], "page": 2, "pageSize": 2, "startDate": "2025-10-01", "endDate": "2025-10-31"}
    )

    assert [item["id"] for item in result["data"]] == ["3", "4"]
    assert result["pagination"] == {"totalCount": 5, "pageSize": 2, "currentPage": 2, "totalPages": 3}


@pytest.mark.asyncio
async def test_invalid_filters_return_error_body(candidates):
    fetch = candidates([])

    result = await ShowSearchService().search({"radiusMiles": "-5"})

    assert result["errorCode"] == "INVALID_FILTER"
    fetch.assert_not_awaited()


@pytest.mark.asyncio
async def test_half_supplied_center_is_invalid(candidates):
    fetch = candidates([_show("seattle", 5, 47.61, -122.33)])

    result = await ShowSearchService().search({"lat": 40.7, "startDate": "2025-10-01", "endDate": "2025-10-31"})

    assert result["errorCode"] == "INVALID_FILTER"
    assert "lat and lng must be supplied together" in result["error"]
    fetch.assert_not_awaited()


@pytest.mark.asyncio
async def test_show_spanning_the_window_is_returned(candidates):
    fetch = candidates(
        [
            _show("spanning", 1, start_date=datetime(2025, 1, 1, tzinfo=TZ), end_date=datetime(2025, 1, 10, tzinfo=TZ)),
            _show("before", 1, start_date=datetime(2025, 1, 1, tzinfo=TZ), end_date=datetime(2025, 1, 4, tzinfo=TZ)),
            _show("after", 1, start_date=datetime(2025, 1, 7, tzinfo=TZ), end_date=datetime(2025, 1, 8, tzinfo=TZ)),
        ]
    )

    result = await ShowSearchService().search({"startDate": "2025-01-05", "endDate": "2025-01-06"})

    assert [item["id"] for item in result["data"]] == ["spanning"]
    window_start, window_end = fetch.await_args.args
    assert window_start == datetime(2025, 1, 5, tzinfo=TZ)
    assert window_end.date() == datetime(2025, 1, 6).date()


@pytest.mark.asyncio
async def test_repository_failure_returns_search_failed(monkeypatch):
    monkeypatch.setattr(
        ShowQueryRepository,
        "fetch_candidates",
        AsyncMock(side_effect=DatabaseError("connection refused", operation="fetch_all")),
    )

    result = await ShowSearchService().search({})

    assert result["errorCode"] == "SEARCH_FAILED"
    assert "connection refused" in result["error"]


@pytest.mark.asyncio
async def test_show_details_bad_id_is_not_found():
    result = await ShowSearchService().get_show_details("not-a-uuid")

    assert result == {"error": "Show with ID not-a-uuid not found", "errorCode": "NOT_FOUND"}


@pytest.mark.asyncio
async def test_show_details_missing_show(monkeypatch):
    monkeypatch.setattr(ShowQueryRepository, "fetch_show", AsyncMock(return_value=None))

    result = await ShowSearchService().get_show_details(SHOW_ID)

    assert result["errorCode"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_show_details_aggregates_organizer_and_dealers(monkeypatch):
    monkeypatch.setattr(
        ShowQueryRepository,
        "fetch_show",
        AsyncMock(return_value=_show(SHOW_ID, 4, 40.7, -74.0, organizer_id=ORGANIZER_ID)),
    )
    monkeypatch.setattr(
        ShowQueryRepository,
        "fetch_profile",
        AsyncMock(return_value={"id": ORGANIZER_ID, "first_name": " Pat ", "last_name": "Lee", "role": "show_organizer"}),
    )
    monkeypatch.setattr(
        ShowQueryRepository,
        "fetch_participants",
        AsyncMock(
            return_value=[
                {"user_id": "u1", "first_name": "zed", "role": "dealer", "participation_status": "confirmed"},
                {"user_id": "u2", "display_name": "Alpha Cards", "role": "MVP_DEALER", "participation_status": "registered"},
                {"user_id": "u3", "first_name": "Amy", "role": "dealer", "participation_status": "cancelled"},
                {"user_id": "u4", "first_name": "Bob", "role": "collector", "participation_status": "confirmed"},
            ]
        ),
    )
    monkeypatch.setattr(ShowQueryRepository, "count_favorites", AsyncMock(return_value=7))

    result = await ShowSearchService().get_show_details(SHOW_ID)

    assert result["show"]["id"] == SHOW_ID
    assert result["organizer"]["name"] == "Pat Lee"
    assert [dealer["id"] for dealer in result["participatingDealers"]] == ["u2", "u1"]
    assert result["participatingDealers"][0]["role"] == "MVP_DEALER"
    assert result["favoriteCount"] == 7


@pytest.mark.asyncio
async def test_show_details_failure_returns_details_failed(monkeypatch):
    monkeypatch.setattr(ShowQueryRepository, "fetch_show", AsyncMock(side_effect=RuntimeError("boom")))

    result = await ShowSearchService().get_show_details(SHOW_ID)

    assert result["errorCode"] == "DETAILS_FAILED"


def test_dealers_sorted_by_role_then_name():
    dealers = [
        ParticipatingDealer(id="1", name="bravo", role="dealer", participation_status="registered"),
        ParticipatingDealer(id="2", name="Alpha", role="dealer", participation_status="confirmed"),
        ParticipatingDealer(id="3", name="Zulu", role="show_organizer", participation_status="confirmed"),
        ParticipatingDealer(id="4", name="Mike", role="mvp_dealer", participation_status="registered"),
    ]

    assert [dealer.id for dealer in select_dealers(dealers)] == ["3", "4", "2", "1"]
