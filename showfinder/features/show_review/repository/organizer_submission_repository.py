"""
Mailing-list records (web_show_submissions).

At most one record exists per pending submission.
"""

import psycopg

from showfinder.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one, fetch_val
from showfinder.features.show_review.domain import OrganizerSubmission
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class OrganizerSubmissionRepositoryError(DatabaseError):
    """More specific exception for mailing-list persistence failures."""


class OrganizerSubmissionRepository:
    SELECT_COLUMNS = """
        id, organizer_name, organizer_email, pending_show_id,
        approved_show_id, status, submitted_at, notes
    """

    @classmethod
    def _row_to_record(cls, row: dict | None) -> OrganizerSubmission | None:
        if not row:
            return None

        return OrganizerSubmission(
            id=str(row["id"]),
            organizer_name=row["organizer_name"],
            organizer_email=row["organizer_email"],
            pending_show_id=str(row["pending_show_id"]) if row.get("pending_show_id") else None,
            approved_show_id=str(row["approved_show_id"]) if row.get("approved_show_id") else None,
            status=row["status"],
            submitted_at=row.get("submitted_at"),
            notes=row.get("notes"),
        )

    @classmethod
    async def create(
        cls,
        organizer_name: str,
        organizer_email: str,
        pending_id: str,
        *,
        connection: psycopg.AsyncConnection,
    ) -> OrganizerSubmission:
        query = f"""
            INSERT INTO web_show_submissions (organizer_name, organizer_email, pending_show_id, status)
            VALUES (%s, %s, %s, 'PENDING')
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(
            query, (organizer_name, organizer_email, pending_id), connection=connection
        )
        if not row:
            raise OrganizerSubmissionRepositoryError(
                "Failed to create mailing-list record", operation="create_submission_record"
            )

        logger.info("Mailing-list record created", pending_id=pending_id)
        return cls._row_to_record(row)

    @classmethod
    async def find_by_pending_id(
        cls, pending_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> OrganizerSubmission | None:
        query = f"SELECT {cls.SELECT_COLUMNS} FROM web_show_submissions WHERE pending_show_id = %s"
        row = await fetch_one(query, (pending_id,), connection=connection)
        return cls._row_to_record(row)

    @classmethod
    async def link_approved_show(
        cls, pending_id: str, show_id: str, *, connection: psycopg.AsyncConnection
    ) -> int:
        query = """
            UPDATE web_show_submissions
            SET approved_show_id = %s,
                status = 'APPROVED'
            WHERE pending_show_id = %s
        """
        return await execute_query(query, (show_id, pending_id), connection=connection)

    @classmethod
    async def mark_rejected(
        cls, pending_id: str, reason: str, *, connection: psycopg.AsyncConnection
    ) -> int:
        query = """
            UPDATE web_show_submissions
            SET status = 'REJECTED',
                notes = %s
            WHERE pending_show_id = %s
        """
        return await execute_query(query, (reason, pending_id), connection=connection)

    @classmethod
    async def list_records(
        cls, status: str | None, limit: int, offset: int
    ) -> tuple[list[OrganizerSubmission], int]:
        """Newest first, with the total count for the same filter."""
        where = "WHERE status = %s" if status else ""
        params: tuple = (status,) if status else ()

        rows = await fetch_all(
            f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM web_show_submissions
            {where}
            ORDER BY submitted_at DESC
            LIMIT %s OFFSET %s
            """,
            (*params, limit, offset),
        )
        total = await fetch_val(f"SELECT COUNT(*) FROM web_show_submissions {where}", params)
        return [cls._row_to_record(row) for row in rows], int(total or 0)
