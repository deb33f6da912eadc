"""
Show search and show detail aggregation.

Both read paths catch every failure and answer ``{error, errorCode}`` so
the mobile client can fall back to "no shows found" instead of crashing.
"""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from showfinder.features.show_search.domain import (
    ParticipatingDealer,
    SearchFilters,
    build_pagination,
    has_features,
    overlaps_window,
    profile_to_dict,
    select_dealers,
    show_to_dict,
)
from showfinder.features.show_search.repository import ShowQueryRepository
from showfinder.infrastructure.observability.logging import get_logger
from showfinder.utils.geo import bounding_box, haversine_miles, is_sentinel, is_valid_coordinate

logger = get_logger(__name__)


def _describe_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "filters"
        parts.append(f"{location}: {item.get('msg')}")
    return "Invalid search filters: " + "; ".join(parts)


class ShowSearchService:
    async def search(self, raw_filters: dict[str, Any] | SearchFilters) -> dict[str, Any]:
        """
        Paginated search over ACTIVE shows overlapping the date window.

        Distance filtering and ordering apply only when the caller sent a
        real center point; the sentinel near (0, 0) searches everywhere.
        """
        try:
            filters = (
                raw_filters
                if isinstance(raw_filters, SearchFilters)
                else SearchFilters.model_validate(raw_filters)
            )
        except PydanticValidationError as e:
            logger.info("Search rejected invalid filters", error_count=e.error_count())
            return {"error": _describe_validation_error(e), "errorCode": "INVALID_FILTER"}

        try:
            return await self._search(filters)
        except Exception as e:
            logger.error("Show search failed", error=str(e), error_type=type(e).__name__)
            return {"error": f"Search failed: {e}", "errorCode": "SEARCH_FAILED"}

    async def _search(self, filters: SearchFilters) -> dict[str, Any]:
        window_start, window_end = filters.window()
        use_distance = not is_sentinel(filters.lat, filters.lng)

        rows = await ShowQueryRepository.fetch_candidates(
            window_start,
            window_end,
            max_entry_fee=filters.max_entry_fee,
            categories=filters.categories or None,
            bounding_box=(
                bounding_box(filters.lat, filters.lng, filters.radius_miles) if use_distance else None
            ),
        )

        matches: list[tuple[dict, float | None]] = []
        for row in rows:
            # Same overlap the SQL prefilters on
            if not overlaps_window(row.get("start_date"), row.get("end_date"), window_start, window_end):
                continue
            if not has_features(row.get("features"), filters.features):
                continue

            distance = None
            if is_valid_coordinate(row.get("latitude"), row.get("longitude")) and use_distance:
                distance = haversine_miles(filters.lat, filters.lng, row["latitude"], row["longitude"])

            if use_distance and (distance is None or distance > filters.radius_miles):
                continue
            matches.append((row, distance))

        matches.sort(
            key=lambda match: (
                match[0]["start_date"],
                match[1] is None,
                match[1] if match[1] is not None else 0.0,
            )
        )

        total_count = len(matches)
        page = matches[filters.offset : filters.offset + filters.page_size]

        logger.info(
            "Show search completed",
            total_count=total_count,
            page=filters.page,
            page_size=filters.page_size,
            distance_filter=use_distance,
        )
        return {
            "data": [show_to_dict(row, distance) for row, distance in page],
            "pagination": build_pagination(total_count, filters.page_size, filters.page),
        }

    async def get_show_details(self, show_id: str) -> dict[str, Any]:
        """Show row, organizer profile, participating dealers and favorite count."""
        not_found = {"error": f"Show with ID {show_id} not found", "errorCode": "NOT_FOUND"}
        try:
            show_id = str(uuid.UUID(str(show_id)))
        except ValueError:
            return not_found

        try:
            show = await ShowQueryRepository.fetch_show(show_id)
            if show is None:
                return not_found

            organizer = None
            if show.get("organizer_id"):
                profile = await ShowQueryRepository.fetch_profile(str(show["organizer_id"]))
                organizer = profile_to_dict(profile) if profile else None

            participants = await ShowQueryRepository.fetch_participants(show_id)
            dealers = select_dealers([ParticipatingDealer.from_row(row) for row in participants])
            favorite_count = await ShowQueryRepository.count_favorites(show_id)

        except Exception as e:
            logger.error("Show details failed", show_id=show_id, error=str(e), error_type=type(e).__name__)
            return {"error": f"Failed to load show details: {e}", "errorCode": "DETAILS_FAILED"}

        return {
            "show": show_to_dict(show),
            "organizer": organizer,
            "participatingDealers": [dealer.to_dict() for dealer in dealers],
            "favoriteCount": favorite_count,
        }


show_search_service = ShowSearchService()
