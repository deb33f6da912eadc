"""
Show discovery routes consumed by the mobile app.

Usage:
    1. GET /shows?lat=..&lng=..&radiusMiles=..&startDate=..&endDate=..
       &maxEntryFee=..&categories=..&features=..&page=..&pageSize=..
    2. GET /shows/{show_id}

Both answer 200; failures come back as ``{error, errorCode}`` bodies.
"""

from fastapi import APIRouter, Request

from showfinder.features.show_search.services import show_search_service

router = APIRouter(prefix="/shows", tags=["shows"])

LIST_PARAMS = ("categories", "features")


@router.get("")
async def search_shows(request: Request) -> dict:
    # Filters are validated by the service so bad input yields INVALID_FILTER, not a 422
    params = request.query_params
    raw_filters: dict = {key: params.get(key) for key in params.keys() if key not in LIST_PARAMS}
    for key in LIST_PARAMS:
        values = params.getlist(key)
        if values:
            raw_filters[key] = values

    return await show_search_service.search(raw_filters)


@router.get("/{show_id}")
async def get_show_details(show_id: str) -> dict:
    return await show_search_service.get_show_details(show_id)
