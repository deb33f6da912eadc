"""
Scraping source registry and priority reinforcement.
"""

import psycopg

from showfinder.db.helpers import fetch_all, fetch_one
from showfinder.features.show_review.domain import ScrapingSource
from showfinder.features.show_review.priority import adjust_priority
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ScrapingSourceRepository:
    SELECT_COLUMNS = """
        url, priority_score, enabled, error_streak,
        last_success_at, last_error_at, notes, updated_at
    """

    @classmethod
    def _row_to_source(cls, row: dict | None) -> ScrapingSource | None:
        if not row:
            return None

        return ScrapingSource(
            url=row["url"],
            priority_score=row["priority_score"],
            enabled=row["enabled"],
            error_streak=row.get("error_streak") or 0,
            last_success_at=row.get("last_success_at"),
            last_error_at=row.get("last_error_at"),
            notes=row.get("notes"),
            updated_at=row.get("updated_at"),
        )

    @classmethod
    async def apply_priority_delta(
        cls, url: str, delta: int, *, connection: psycopg.AsyncConnection
    ) -> int | None:
        """
        Shift a source's priority by ``delta`` within 0..100.

        Returns the new score, or None when the URL is not a registered source.
        """
        row = await fetch_one(
            "SELECT priority_score FROM scraping_sources WHERE url = %s FOR UPDATE",
            (url,),
            connection=connection,
        )
        if not row:
            return None

        new_score = adjust_priority(row["priority_score"], delta)
        await connection.execute(
            """
            UPDATE scraping_sources
            SET priority_score = %s,
                updated_at = NOW()
            WHERE url = %s
            """,
            (new_score, url),
        )

        logger.info(
            "Scraping source priority adjusted",
            source_url=url,
            previous=row["priority_score"],
            priority=new_score,
        )
        return new_score

    @classmethod
    async def list_sources(cls, enabled: bool | None = None) -> list[ScrapingSource]:
        where = "WHERE enabled = %s" if enabled is not None else ""
        params: tuple = (enabled,) if enabled is not None else ()
        rows = await fetch_all(
            f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM scraping_sources
            {where}
            ORDER BY priority_score DESC, url
            """,
            params,
        )
        return [cls._row_to_source(row) for row in rows]

    @classmethod
    async def update_source(
        cls,
        url: str,
        priority_score: int | None = None,
        enabled: bool | None = None,
        notes: str | None = None,
    ) -> ScrapingSource | None:
        query = f"""
            UPDATE scraping_sources
            SET priority_score = COALESCE(%s, priority_score),
                enabled = COALESCE(%s, enabled),
                notes = COALESCE(%s, notes),
                updated_at = NOW()
            WHERE url = %s
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(query, (priority_score, enabled, notes, url))
        if row:
            logger.info("Scraping source updated", source_url=url, priority=row["priority_score"])
        return cls._row_to_source(row)
