"""
Append-only coordinate issue log. Rows are resolved, never deleted.
"""

import psycopg

from showfinder.db.helpers import execute_query, fetch_all, fetch_val
from showfinder.features.show_review.domain import CoordinateIssue
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class CoordinateIssueRepository:
    @classmethod
    def _row_to_issue(cls, row: dict) -> CoordinateIssue:
        return CoordinateIssue(
            id=str(row["id"]),
            show_id=str(row["show_id"]),
            issue_type=row["issue_type"],
            latitude=row.get("latitude"),
            longitude=row.get("longitude"),
            created_at=row.get("created_at"),
            show_title=row.get("title"),
            resolved_at=row.get("resolved_at"),
            resolved_by=str(row["resolved_by"]) if row.get("resolved_by") else None,
        )

    @classmethod
    async def log_issue(
        cls,
        show_id: str,
        issue_type: str,
        latitude: float | None,
        longitude: float | None,
        *,
        connection: psycopg.AsyncConnection,
    ) -> None:
        query = """
            INSERT INTO coordinate_issues (show_id, latitude, longitude, issue_type)
            VALUES (%s, %s, %s, %s)
        """
        await execute_query(query, (show_id, latitude, longitude, issue_type), connection=connection)
        logger.warning("Coordinate issue logged", show_id=show_id, issue_type=issue_type)

    @classmethod
    async def list_open(cls, limit: int, offset: int) -> tuple[list[CoordinateIssue], int]:
        rows = await fetch_all(
            """
            SELECT ci.id, ci.show_id, ci.issue_type, ci.latitude, ci.longitude,
                   ci.created_at, ci.resolved_at, ci.resolved_by, s.title
            FROM coordinate_issues ci
            JOIN shows s ON s.id = ci.show_id
            WHERE ci.resolved_at IS NULL
            ORDER BY ci.created_at DESC
            LIMIT %s OFFSET %s
            """,
            (limit, offset),
        )
        total = await fetch_val("SELECT COUNT(*) FROM coordinate_issues WHERE resolved_at IS NULL")
        return [cls._row_to_issue(row) for row in rows], int(total or 0)

    @classmethod
    async def count_open_for_show(
        cls, show_id: str, *, connection: psycopg.AsyncConnection
    ) -> int:
        query = "SELECT COUNT(*) FROM coordinate_issues WHERE show_id = %s AND resolved_at IS NULL"
        return int(await fetch_val(query, (show_id,), connection=connection) or 0)

    @classmethod
    async def resolve_open(
        cls, show_id: str, admin_id: str | None, *, connection: psycopg.AsyncConnection
    ) -> int:
        query = """
            UPDATE coordinate_issues
            SET resolved_at = NOW(),
                resolved_by = %s
            WHERE show_id = %s
              AND resolved_at IS NULL
        """
        resolved = await execute_query(query, (admin_id, show_id), connection=connection)
        logger.info("Coordinate issues resolved", show_id=show_id, resolved=resolved)
        return resolved
