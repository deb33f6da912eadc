"""
Domain models for show discovery.

``SearchFilters`` validates raw query input; the remaining helpers shape
database rows into the camelCase documents the mobile client reads.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from showfinder.config import settings

DEALER_ROLE_ORDER = {"show_organizer": 0, "mvp_dealer": 1, "dealer": 2}
ACTIVE_PARTICIPATION = {"registered", "confirmed"}


class SearchFilters(BaseModel):
    """Validated search input. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)
    radius_miles: float = Field(default_factory=lambda: settings.SEARCH_DEFAULT_RADIUS_MILES, gt=0, le=500)
    start_date: date | datetime | None = None
    end_date: date | datetime | None = None
    max_entry_fee: Decimal | None = Field(None, ge=0)
    categories: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    page: int = Field(1, ge=1)
    page_size: int = Field(
        default_factory=lambda: settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_long(cls, data: Any) -> Any:
        # Older clients send "long" for longitude
        if isinstance(data, dict) and "long" in data and "lng" not in data:
            data = {**data, "lng": data["long"]}
        return data

    @field_validator("categories", "features", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            items: list[str] = []
            for item in value:
                if isinstance(item, str):
                    items.extend(part.strip() for part in item.split(",") if part.strip())
                else:
                    items.append(item)
            return items
        return value

    @model_validator(mode="after")
    def _complete_center(self) -> SearchFilters:
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be supplied together")
        return self

    @model_validator(mode="after")
    def _window_order(self) -> SearchFilters:
        start, end = self.window()
        if end < start:
            raise ValueError("endDate must not be before startDate")
        return self

    def window(self) -> tuple[datetime, datetime]:
        """
        Inclusive [start, end] instants of the search window.

        Date-only bounds cover whole days in the default timezone; the
        default window is today through today + 30 days.
        """
        tz = ZoneInfo(settings.DEFAULT_TIMEZONE)
        today = datetime.now(tz).date()

        start = self.start_date if self.start_date is not None else today
        end = (
            self.end_date
            if self.end_date is not None
            else today + timedelta(days=settings.SEARCH_DEFAULT_WINDOW_DAYS)
        )
        return _as_instant(start, tz, time.min), _as_instant(end, tz, time.max)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _as_instant(value: datetime | date, tz: ZoneInfo, clock: time) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=tz)
    return datetime.combine(value, clock, tzinfo=tz)


def overlaps_window(
    start: datetime | None, end: datetime | None, window_start: datetime, window_end: datetime
) -> bool:
    """True when any part of [start, end] falls inside the inclusive window."""
    if start is None:
        return False
    end = end or start
    return start <= window_end and end >= window_start


def build_pagination(total_count: int, page_size: int, page: int) -> dict[str, int]:
    """totalPages is at least 1 even when nothing matched."""
    return {
        "totalCount": total_count,
        "pageSize": page_size,
        "currentPage": page,
        "totalPages": math.ceil(max(total_count, 1) / page_size),
    }


def has_features(show_features: Any, required: list[str]) -> bool:
    """Every requested feature key must be present and truthy on the show."""
    if not required:
        return True
    if isinstance(show_features, dict):
        return all(bool(show_features.get(key)) for key in required)
    if isinstance(show_features, list):
        present = set()
        for item in show_features:
            if isinstance(item, str):
                present.add(item)
            elif isinstance(item, dict):
                present.update(key for key, flag in item.items() if flag)
        return all(key in present for key in required)
    return False


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, (datetime, date)) else value


def _number(value: Any) -> Any:
    return float(value) if isinstance(value, Decimal) else value


def show_to_dict(row: dict[str, Any], distance_miles: float | None = None) -> dict[str, Any]:
    document = {
        "id": str(row["id"]),
        "title": row.get("title"),
        "description": row.get("description"),
        "location": row.get("location"),
        "address": row.get("address"),
        "startDate": _iso(row.get("start_date")),
        "endDate": _iso(row.get("end_date")),
        "dailySchedule": row.get("daily_schedule"),
        "entryFee": _number(row.get("entry_fee")),
        "imageUrl": row.get("image_url"),
        "websiteUrl": row.get("website_url"),
        "latitude": row.get("latitude"),
        "longitude": row.get("longitude"),
        "status": row.get("status"),
        "features": row.get("features") if row.get("features") is not None else [],
        "categories": row.get("categories") or [],
        "organizerId": str(row["organizer_id"]) if row.get("organizer_id") else None,
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }
    if distance_miles is not None:
        document["distanceMiles"] = round(distance_miles, 2)
    else:
        document["distanceMiles"] = None
    return document


def resolve_display_name(display_name: str | None, first_name: str | None, last_name: str | None) -> str:
    """Custom display name if non-blank, else trimmed first + last."""
    if display_name and display_name.strip():
        return display_name.strip()
    return f"{(first_name or '').strip()} {(last_name or '').strip()}".strip()


def profile_to_dict(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "name": resolve_display_name(row.get("display_name"), row.get("first_name"), row.get("last_name")),
        "firstName": row.get("first_name"),
        "lastName": row.get("last_name"),
        "profileImageUrl": row.get("profile_image_url"),
        "role": (row.get("role") or "").upper() or None,
        "accountType": row.get("account_type"),
        "facebookUrl": row.get("facebook_url"),
        "instagramUrl": row.get("instagram_url"),
        "twitterUrl": row.get("twitter_url"),
        "whatnotUrl": row.get("whatnot_url"),
        "ebayStoreUrl": row.get("ebay_store_url"),
    }


@dataclass(slots=True)
class ParticipatingDealer:
    """A show participant joined with their profile and booth details."""

    id: str
    name: str
    role: str
    participation_status: str
    profile_image_url: str | None = None
    account_type: str | None = None
    booth: dict[str, Any] = field(default_factory=dict)
    social: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ParticipatingDealer:
        return cls(
            id=str(row["user_id"]),
            name=resolve_display_name(row.get("display_name"), row.get("first_name"), row.get("last_name")),
            role=(row.get("role") or "").lower(),
            participation_status=(row.get("participation_status") or "").lower(),
            profile_image_url=row.get("profile_image_url"),
            account_type=row.get("account_type"),
            booth={
                "boothLocation": row.get("booth_location"),
                "cardTypes": row.get("card_types"),
                "specialty": row.get("specialty"),
                "priceRange": row.get("price_range"),
                "notableItems": row.get("notable_items"),
                "paymentMethods": row.get("payment_methods"),
                "openToTrades": row.get("open_to_trades"),
                "buyingCards": row.get("buying_cards"),
            },
            social={
                "facebookUrl": row.get("facebook_url"),
                "instagramUrl": row.get("instagram_url"),
                "twitterUrl": row.get("twitter_url"),
                "whatnotUrl": row.get("whatnot_url"),
                "ebayStoreUrl": row.get("ebay_store_url"),
            },
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "profileImageUrl": self.profile_image_url,
            "role": self.role.upper(),
            "accountType": self.account_type,
            **self.booth,
            **self.social,
        }


def select_dealers(dealers: list[ParticipatingDealer]) -> list[ParticipatingDealer]:
    """
    Keep dealer-type roles with an active participation and order them
    show_organizer, mvp_dealer, dealer, then by name (case-insensitive).
    """
    eligible = [
        dealer
        for dealer in dealers
        if dealer.role in DEALER_ROLE_ORDER and dealer.participation_status in ACTIVE_PARTICIPATION
    ]
    return sorted(eligible, key=lambda dealer: (DEALER_ROLE_ORDER[dealer.role], dealer.name.casefold()))


