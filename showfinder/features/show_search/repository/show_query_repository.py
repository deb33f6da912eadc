"""
Read-only queries behind show search and show details.
"""

from datetime import datetime
from decimal import Decimal

from showfinder.db.helpers import fetch_all, fetch_one, fetch_val, with_db_retry

SHOW_COLUMNS = """
    s.id, s.title, s.description, s.location, s.address,
    s.start_date, s.end_date, s.daily_schedule, s.entry_fee,
    s.image_url, s.website_url, s.latitude, s.longitude,
    s.status, s.features, s.categories, s.organizer_id,
    s.created_at, s.updated_at
"""

PROFILE_COLUMNS = """
    p.id, p.first_name, p.last_name, p.display_name, p.profile_image_url,
    p.role, p.account_type, p.facebook_url, p.instagram_url, p.twitter_url,
    p.whatnot_url, p.ebay_store_url
"""


class ShowQueryRepository:
    @classmethod
    @with_db_retry(max_retries=2)
    async def fetch_candidates(
        cls,
        window_start: datetime,
        window_end: datetime,
        max_entry_fee: Decimal | None = None,
        categories: list[str] | None = None,
        bounding_box: tuple[float, float, float, float] | None = None,
        status: str = "ACTIVE",
    ) -> list[dict]:
        """
        Shows active at any point in the window (date-range overlap).

        ``bounding_box`` is (min_lat, max_lat, min_lng, max_lng); rows
        without coordinates are excluded when it is given.
        """
        conditions = [
            "s.status = %s",
            "s.end_date >= %s",
            "s.start_date <= %s",
        ]
        params: list = [status, window_start, window_end]

        if max_entry_fee is not None:
            conditions.append("s.entry_fee <= %s")
            params.append(max_entry_fee)

        if categories:
            conditions.append("s.categories && %s::text[]")
            params.append(list(categories))

        if bounding_box is not None:
            min_lat, max_lat, min_lng, max_lng = bounding_box
            conditions.append("s.latitude IS NOT NULL AND s.longitude IS NOT NULL")
            conditions.append("s.latitude BETWEEN %s AND %s")
            params.extend([min_lat, max_lat])
            if min_lng >= -180 and max_lng <= 180:
                conditions.append("s.longitude BETWEEN %s AND %s")
                params.extend([min_lng, max_lng])

        query = f"""
            SELECT {SHOW_COLUMNS}
            FROM shows s
            WHERE {" AND ".join(conditions)}
            ORDER BY s.start_date ASC, s.id
        """
        return await fetch_all(query, tuple(params))

    @classmethod
    @with_db_retry(max_retries=2)
    async def fetch_show(cls, show_id: str) -> dict | None:
        return await fetch_one(f"SELECT {SHOW_COLUMNS} FROM shows s WHERE s.id = %s", (show_id,))

    @classmethod
    @with_db_retry(max_retries=2)
    async def fetch_profile(cls, profile_id: str) -> dict | None:
        return await fetch_one(f"SELECT {PROFILE_COLUMNS} FROM profiles p WHERE p.id = %s", (profile_id,))

    @classmethod
    @with_db_retry(max_retries=2)
    async def fetch_participants(cls, show_id: str) -> list[dict]:
        query = f"""
            SELECT
                sp.userid AS user_id,
                sp.status AS participation_status,
                sp.booth_location, sp.card_types, sp.specialty, sp.price_range,
                sp.notable_items, sp.payment_methods, sp.open_to_trades, sp.buying_cards,
                {PROFILE_COLUMNS}
            FROM show_participants sp
            JOIN profiles p ON p.id = sp.userid
            WHERE sp.showid = %s
        """
        return await fetch_all(query, (show_id,))

    @classmethod
    @with_db_retry(max_retries=2)
    async def count_favorites(cls, show_id: str) -> int:
        count = await fetch_val(
            "SELECT COUNT(*) FROM user_favorite_shows WHERE show_id = %s", (show_id,)
        )
        return int(count or 0)
