"""
Great-circle helpers shared by approval and search.

Coordinates are stored as plain latitude/longitude doubles, so distance is
computed here with the haversine formula rather than in the database.
"""

import math

EARTH_RADIUS_MILES = 3958.8

# Both components under this magnitude means the client never resolved a location
SENTINEL_THRESHOLD = 0.1


def is_valid_coordinate(latitude: float | None, longitude: float | None) -> bool:
    """
    A usable point: both present, finite, in range, and not exactly (0, 0).
    """
    if latitude is None or longitude is None:
        return False
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        return False
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return False
    return not (lat == 0.0 and lng == 0.0)


def is_sentinel(latitude: float | None, longitude: float | None) -> bool:
    """True when a search center is the unset placeholder near (0, 0)."""
    if latitude is None or longitude is None:
        return True
    return abs(latitude) < SENTINEL_THRESHOLD and abs(longitude) < SENTINEL_THRESHOLD


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(latitude: float, longitude: float, radius_miles: float) -> tuple[float, float, float, float]:
    """
    Loose (min_lat, max_lat, min_lng, max_lng) box around a point.

    Used as an index-friendly SQL prefilter; the exact radius check is
    still done with ``haversine_miles``.
    """
    lat_delta = math.degrees(radius_miles / EARTH_RADIUS_MILES)
    cos_lat = math.cos(math.radians(latitude))
    if cos_lat < 1e-6:
        lng_delta = 180.0
    else:
        lng_delta = min(180.0, math.degrees(radius_miles / (EARTH_RADIUS_MILES * cos_lat)))

    return (
        max(-90.0, latitude - lat_delta),
        min(90.0, latitude + lat_delta),
        longitude - lng_delta,
        longitude + lng_delta,
    )
