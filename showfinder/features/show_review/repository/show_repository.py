"""
Writes to the canonical shows table.

Upsert is find-by-natural-key then insert or update, always inside the
approval transaction.
"""

from datetime import datetime

import psycopg
from psycopg.types.json import Jsonb

from showfinder.db.helpers import DatabaseError, execute_query, fetch_one
from showfinder.features.show_review.domain import NormalizedShow
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ShowRepositoryError(DatabaseError):
    """More specific exception for show persistence failures."""


class ShowRepository:
    @staticmethod
    def _schedule_param(show: NormalizedShow) -> Jsonb | None:
        schedule = show.schedule_json
        return Jsonb(schedule) if schedule is not None else None

    @classmethod
    async def find_by_natural_key(
        cls,
        title: str,
        start_date: datetime,
        location: str,
        *,
        connection: psycopg.AsyncConnection,
    ) -> str | None:
        query = """
            SELECT id
            FROM shows
            WHERE title = %s
              AND start_date = %s
              AND location = %s
            FOR UPDATE
        """
        row = await fetch_one(query, (title, start_date, location), connection=connection)
        return str(row["id"]) if row else None

    @classmethod
    async def insert(cls, show: NormalizedShow, *, connection: psycopg.AsyncConnection) -> dict:
        """Insert a new ACTIVE show and return its id and stored coordinates."""
        query = """
            INSERT INTO shows (
                title, description, location, address,
                start_date, end_date, daily_schedule, entry_fee,
                image_url, website_url, latitude, longitude,
                status, features, categories
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 'ACTIVE', %s, %s)
            RETURNING id, latitude, longitude
        """
        params = (
            show.title,
            show.description,
            show.location,
            show.address,
            show.start_date,
            show.end_date,
            cls._schedule_param(show),
            show.entry_fee,
            show.image_url,
            show.website_url,
            show.latitude,
            show.longitude,
            Jsonb(show.features),
            show.categories,
        )

        row = await fetch_one(query, params, connection=connection)
        if not row:
            raise ShowRepositoryError("Failed to insert show", operation="insert_show")

        logger.info("Show inserted", show_id=str(row["id"]), title=show.title)
        return {"id": str(row["id"]), "latitude": row["latitude"], "longitude": row["longitude"]}

    @classmethod
    async def update(
        cls, show_id: str, show: NormalizedShow, *, connection: psycopg.AsyncConnection
    ) -> dict:
        """
        Refresh the mutable fields of an existing show.

        Known coordinates are kept when the new submission carries none.
        """
        query = """
            UPDATE shows
            SET description = %s,
                address = %s,
                end_date = %s,
                daily_schedule = %s,
                entry_fee = %s,
                image_url = COALESCE(%s, image_url),
                website_url = COALESCE(%s, website_url),
                latitude = COALESCE(%s, latitude),
                longitude = COALESCE(%s, longitude),
                features = %s,
                categories = %s,
                updated_at = NOW()
            WHERE id = %s
            RETURNING id, latitude, longitude
        """
        params = (
            show.description,
            show.address,
            show.end_date,
            cls._schedule_param(show),
            show.entry_fee,
            show.image_url,
            show.website_url,
            show.latitude,
            show.longitude,
            Jsonb(show.features),
            show.categories,
            show_id,
        )

        row = await fetch_one(query, params, connection=connection)
        if not row:
            raise ShowRepositoryError("Failed to update show", operation="update_show")

        logger.info("Show updated from re-approval", show_id=show_id, title=show.title)
        return {"id": str(row["id"]), "latitude": row["latitude"], "longitude": row["longitude"]}

    @classmethod
    async def set_coordinates(
        cls,
        show_id: str,
        latitude: float,
        longitude: float,
        *,
        connection: psycopg.AsyncConnection,
    ) -> bool:
        query = """
            UPDATE shows
            SET latitude = %s,
                longitude = %s,
                updated_at = NOW()
            WHERE id = %s
        """
        updated = await execute_query(query, (latitude, longitude, show_id), connection=connection)
        if updated:
            logger.info("Show coordinates set", show_id=show_id)
        return updated > 0
