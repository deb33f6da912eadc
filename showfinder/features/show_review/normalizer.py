"""
Submission normalizer.

Turns a loosely shaped submission payload into the fields a published show
needs. Individual fields degrade to ``None`` or a default when they cannot
be parsed; only structural problems (not an object, no usable start date,
conflicting schedule timezones) raise ``ValidationError``.
"""

from __future__ import annotations

import html
import re
from datetime import datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

from showfinder.config import settings
from showfinder.features.show_review.domain import (
    CoordinateIssueType,
    DailyScheduleEntry,
    NormalizedShow,
    UntrustedPayload,
)
from showfinder.features.show_review.errors import ValidationError
from showfinder.utils.geo import is_valid_coordinate

DEFAULT_TITLE = "Untitled Show"
PLACEHOLDER = "TBD"

DAY_START = time(0, 0)
DAY_END = time(23, 59)

STATE_CODES = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR", "california": "CA",
    "colorado": "CO", "connecticut": "CT", "delaware": "DE", "florida": "FL", "georgia": "GA",
    "hawaii": "HI", "idaho": "ID", "illinois": "IL", "indiana": "IN", "iowa": "IA",
    "kansas": "KS", "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS",
    "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK",
    "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT", "vermont": "VT",
    "virginia": "VA", "washington": "WA", "west virginia": "WV", "wisconsin": "WI",
    "wyoming": "WY",
}

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_FEE_STRIP_RE = re.compile(r"[^0-9.]")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_ORDINAL = r"(?:st|nd|rd|th)?"
_DAY_RANGE_RE = re.compile(
    rf"(?P<month>[A-Za-z]{{3,9}})\.?\s+(?P<first>\d{{1,2}}){_ORDINAL}(?:,?\s+\d{{4}})?\s*"
    r"(?:-|–|&|\band\b|\bto\b|\bthru\b|\bthrough\b|/)\s*"
    rf"(?:(?P<last_month>[A-Za-z]{{3,9}})\.?\s+)?(?P<last>\d{{1,2}}){_ORDINAL},?\s+(?P<year>\d{{4}})\b",
    re.IGNORECASE,
)
# "9am-3pm" style hours; only the opening time is kept
_CLOCK_RANGE_RE = re.compile(
    r"(?P<first>\b\d{1,2}(?::\d{2})?\s*(?:[ap]\.?m\.?)?)\s*(?:-|–|\bto\b)\s*\d{1,2}(?::\d{2})?\s*[ap]\.?m\.?",
    re.IGNORECASE,
)
_CLOCK_RE = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::\d{2})?\s*(?:(?P<meridiem>[ap])\.?m?\.?)?$",
    re.IGNORECASE,
)

# Parsing under both defaults exposes any date part the text left out
_DEFAULT_PAIR = (datetime(2000, 1, 1), datetime(2001, 2, 2))


# =============================================================================
# FIELD HELPERS
# =============================================================================


def clean_text(value: str | None) -> str | None:
    """Strip tags, unescape entities and collapse whitespace."""
    if value is None:
        return None
    cleaned = _TAG_RE.sub("", value)
    cleaned = html.unescape(cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned or None


def normalize_state(state: str | None) -> str | None:
    if not state:
        return None
    state = state.strip()
    if re.fullmatch(r"[A-Z]{2}", state):
        return state

    lowered = state.lower()
    if lowered in STATE_CODES:
        return STATE_CODES[lowered]
    # Longest names first so "west virginia" wins over "virginia"
    for name in sorted(STATE_CODES, key=len, reverse=True):
        if name in lowered:
            return STATE_CODES[name]

    return state.upper() if len(state) <= 2 else state


def parse_entry_fee(value: Any) -> Decimal | None:
    """
    Coerce a free-text fee into a number.

    "$5.00" -> 5.00, "5" -> 5, "" -> None, "free" -> None. Never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            fee = Decimal(str(value))
        except InvalidOperation:
            return None
        return fee if fee.is_finite() else None
    if not isinstance(value, str):
        return None

    digits = _FEE_STRIP_RE.sub("", value)
    if not digits:
        return None
    try:
        return Decimal(digits)
    except InvalidOperation:
        return None


def resolve_timezone(name: str | None, default: str) -> ZoneInfo:
    for candidate in (name, default):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            continue
    return ZoneInfo("UTC")


def _day_range(text: str) -> tuple[datetime, datetime] | None:
    """Naive first and last day of "Oct 4-6, 2025" style ranges."""
    match = _DAY_RANGE_RE.search(text)
    if match is None:
        return None
    year = match["year"]
    first = date_parser.parse(f"{match['month']} {match['first']} {year}")
    last = date_parser.parse(f"{match['last_month'] or match['month']} {match['last']} {year}")
    if last < first:
        # "Dec 30 - Jan 2, 2026" names the closing year
        first = first.replace(year=first.year - 1)
    return first, last


def _parse_free_text(text: str) -> datetime | None:
    """
    Parse prose dates, refusing anything dateutil had to guess.

    A result is kept only when no digit was skipped as noise and the day,
    month and year all came from the text rather than the parse default.
    """
    text = _CLOCK_RANGE_RE.sub(lambda match: match["first"], text)
    results = []
    for default in _DEFAULT_PAIR:
        parsed, skipped = date_parser.parse(text, default=default, fuzzy_with_tokens=True, ignoretz=True)
        if any(char.isdigit() for token in skipped for char in token):
            return None
        results.append(parsed)
    first, second = results
    if first.date() != second.date():
        return None
    return first


def _parse_text(text: str, tz: ZoneInfo) -> tuple[datetime, datetime] | None:
    if _ISO_DATE_RE.match(text):
        try:
            parsed = date_parser.isoparse(text)
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=tz)
            return parsed, parsed

    span = _day_range(text)
    if span is None:
        parsed = _parse_free_text(text)
        if parsed is None:
            return None
        span = (parsed, parsed)
    return span[0].replace(tzinfo=tz), span[1].replace(tzinfo=tz)


def parse_date_span(value: Any, tz: ZoneInfo) -> tuple[datetime, datetime] | None:
    """
    First and last instant named by a date value.

    A single date gives the same instant twice; a day range such as
    "Oct 4-6, 2025" gives its first and last day. Naive values are read as
    wall time in ``tz``. Returns ``None`` when the value is not a complete,
    unambiguous date.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            # Scrapers occasionally send epoch milliseconds
            parsed = datetime.fromtimestamp(value / 1000, tz=tz)
            return parsed, parsed
        if not isinstance(value, str) or not value.strip():
            return None
        return _parse_text(value.strip(), tz)
    except (ValueError, OverflowError, TypeError, OSError):
        return None


def parse_datetime(value: Any, tz: ZoneInfo) -> datetime | None:
    """Parse a date value; day ranges resolve to their first day."""
    span = parse_date_span(value, tz)
    return span[0] if span else None


def _parse_clock(value: Any, fallback: time) -> time:
    if not isinstance(value, str) or not value.strip():
        return fallback

    match = _CLOCK_RE.match(value.strip())
    if match is None:
        return fallback
    hour = int(match["hour"])
    minute = int(match["minute"] or 0)
    meridiem = (match["meridiem"] or "").lower()
    if meridiem:
        if not 1 <= hour <= 12:
            return fallback
        hour = hour % 12 + (12 if meridiem == "p" else 0)
    if hour > 23 or minute > 59:
        return fallback
    return time(hour, minute)


# =============================================================================
# SCHEDULE
# =============================================================================


def declared_timezones(payload: UntrustedPayload) -> set[str]:
    """Distinct non-blank timezones declared across dailySchedule entries."""
    zones: set[str] = set()
    for entry in payload.array("dailySchedule") or []:
        entry_payload = UntrustedPayload(entry)
        zone = entry_payload.text("timezone")
        if zone:
            zones.add(zone)
    return zones


def ensure_single_timezone(payload: UntrustedPayload) -> None:
    """Refuse schedules whose days disagree on their timezone."""
    if len(declared_timezones(payload)) > 1:
        raise ValidationError("dailySchedule entries declare conflicting timezones")


def extract_schedule(payload: UntrustedPayload, default_timezone: str) -> list[DailyScheduleEntry]:
    """
    Build timezone-aware entries from ``dailySchedule``.

    The first declared timezone applies to every entry. Entries whose date
    does not parse are dropped.
    """
    raw_entries = payload.array("dailySchedule") or []
    if not raw_entries:
        return []

    ensure_single_timezone(payload)
    zones = [UntrustedPayload(entry).text("timezone") for entry in raw_entries]
    zone_name = next((zone for zone in zones if zone), None) or default_timezone
    tz = resolve_timezone(zone_name, default_timezone)

    entries: list[DailyScheduleEntry] = []
    for raw in raw_entries:
        entry = UntrustedPayload(raw)
        if not entry.is_object:
            continue
        day = parse_datetime(entry.text("date"), tz)
        if day is None:
            continue

        start_clock = _parse_clock(entry.raw("startTime"), DAY_START)
        end_clock = _parse_clock(entry.raw("endTime"), DAY_END)
        starts_at = datetime.combine(day.date(), start_clock, tzinfo=tz)
        ends_at = datetime.combine(day.date(), end_clock, tzinfo=tz)
        if ends_at < starts_at:
            # Overnight hours close on the following day
            ends_at += timedelta(days=1)

        entries.append(
            DailyScheduleEntry(
                date=day.date().isoformat(),
                start_time=start_clock.strftime("%H:%M"),
                end_time=end_clock.strftime("%H:%M"),
                timezone=tz.key,
                notes=clean_text(entry.text("notes")) or "",
                starts_at=starts_at,
                ends_at=ends_at,
            )
        )

    entries.sort(key=lambda item: item.starts_at)
    return entries


# =============================================================================
# COORDINATES
# =============================================================================


def _read_point(payload: UntrustedPayload | None) -> tuple[float | None, float | None, bool]:
    """Return (lat, lng, present) from either key convention."""
    if payload is None or not payload.is_object:
        return None, None, False
    present = any(payload.has(key) for key in ("latitude", "longitude", "lat", "lng"))
    return payload.number("latitude", "lat"), payload.number("longitude", "lng"), present


def extract_coordinates(
    payload: UntrustedPayload, geocoded: UntrustedPayload | None
) -> tuple[float | None, float | None, CoordinateIssueType | None, float | None, float | None]:
    """
    Pick coordinates, geocoded payload first.

    Returns (latitude, longitude, issue, raw_latitude, raw_longitude); the
    pair is ``None`` whenever it is not a usable point.
    """
    lat, lng, present = _read_point(geocoded)
    if not present:
        lat, lng, present = _read_point(payload)

    if is_valid_coordinate(lat, lng):
        return lat, lng, None, lat, lng
    if not present or (lat is None and lng is None):
        return None, None, CoordinateIssueType.NULL_COORDINATES, None, None
    return None, None, CoordinateIssueType.INVALID_COORDINATES, lat, lng


# =============================================================================
# ENTRY POINT
# =============================================================================


def normalize_submission(
    payload: UntrustedPayload,
    geocoded: UntrustedPayload | None = None,
    *,
    default_timezone: str | None = None,
) -> NormalizedShow:
    """
    Derive canonical show fields from a submission payload.

    Raises:
        ValidationError: payload is not an object, the start date is missing
            or unparseable, or the schedule mixes timezones
    """
    if not payload.is_object:
        raise ValidationError("Submission payload must be a JSON object")

    default_timezone = default_timezone or settings.DEFAULT_TIMEZONE
    schedule = extract_schedule(payload, default_timezone)

    if schedule:
        start_date = min(entry.starts_at for entry in schedule)
        end_date = max(entry.ends_at for entry in schedule)
        timezone_name = schedule[0].timezone
    else:
        tz = resolve_timezone(payload.text("timezone"), default_timezone)
        timezone_name = tz.key
        start_span = parse_date_span(payload.raw("startDate"), tz)
        if start_span is None:
            raise ValidationError("startDate is missing or could not be parsed")
        start_date = start_span[0]
        # A ranged startDate ("Oct 4-6, 2025") closes on its last day
        end_span = parse_date_span(payload.raw("endDate"), tz)
        end_date = end_span[1] if end_span else start_span[1]
        if end_date < start_date:
            raise ValidationError("endDate is before startDate")

    venue = clean_text(payload.text("venueName"))
    city = clean_text(payload.text("city"))
    state = normalize_state(clean_text(payload.text("state")))

    address = clean_text(payload.text("address"))
    if not address:
        parts = [part for part in (venue, city, state) if part]
        address = ", ".join(parts) if parts else PLACEHOLDER

    features = payload.array("features")
    lat, lng, issue, raw_lat, raw_lng = extract_coordinates(payload, geocoded)

    return NormalizedShow(
        title=clean_text(payload.text("name", "title")) or DEFAULT_TITLE,
        description=clean_text(payload.text("description")),
        location=venue or city or PLACEHOLDER,
        address=address,
        start_date=start_date,
        end_date=end_date,
        timezone=timezone_name,
        daily_schedule=schedule,
        entry_fee=parse_entry_fee(payload.raw("entryFee")),
        image_url=payload.text("imageUrl"),
        website_url=payload.text("websiteUrl", "url"),
        latitude=lat,
        longitude=lng,
        coordinate_issue=issue,
        raw_latitude=raw_lat,
        raw_longitude=raw_lng,
        features=features if features is not None else [],
        categories=payload.string_list("categories"),
        organizer_name=clean_text(payload.text("organizerName")),
        organizer_email=payload.text("organizerEmail", "contactEmail"),
    )
