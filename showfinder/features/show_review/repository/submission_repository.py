"""
Persistence for pending submissions (scraped_shows_pending).

State transitions pass the caller's transaction ``connection`` so the
row lock taken by ``load(..., for_update=True)`` is held until commit.
"""

import psycopg
from psycopg.types.json import Jsonb

from showfinder.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one, fetch_val
from showfinder.features.show_review.domain import PendingSubmission, SubmissionStatus
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class SubmissionRepositoryError(DatabaseError):
    """More specific exception for pending-submission persistence failures."""


class SubmissionRepository:
    SELECT_COLUMNS = """
        id, source_url, raw_payload, normalized_json, geocoded_json,
        status, admin_notes, created_at, reviewed_at
    """

    @classmethod
    def _row_to_submission(cls, row: dict | None) -> PendingSubmission | None:
        if not row:
            return None

        return PendingSubmission(
            id=str(row["id"]),
            source_url=row["source_url"],
            raw_payload=row["raw_payload"],
            normalized_payload=row.get("normalized_json"),
            geocoded_payload=row.get("geocoded_json"),
            status=SubmissionStatus(row["status"]),
            admin_notes=row.get("admin_notes"),
            created_at=row.get("created_at"),
            reviewed_at=row.get("reviewed_at"),
        )

    @classmethod
    async def create(
        cls,
        source_url: str,
        raw_payload: dict,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> PendingSubmission:
        query = f"""
            INSERT INTO scraped_shows_pending (source_url, raw_payload, status)
            VALUES (%s, %s, 'PENDING')
            RETURNING {cls.SELECT_COLUMNS}
        """

        row = await fetch_one(query, (source_url, Jsonb(raw_payload)), connection=connection)
        if not row:
            raise SubmissionRepositoryError("Failed to create pending submission", operation="create")

        submission = cls._row_to_submission(row)
        logger.info("Pending submission created", pending_id=submission.id, source_url=source_url)
        return submission

    @classmethod
    async def load(
        cls,
        pending_id: str,
        *,
        for_update: bool = False,
        connection: psycopg.AsyncConnection | None = None,
    ) -> PendingSubmission | None:
        """Return the submission, locking the row when ``for_update`` is set."""
        lock = " FOR UPDATE" if for_update else ""
        query = f"SELECT {cls.SELECT_COLUMNS} FROM scraped_shows_pending WHERE id = %s{lock}"
        row = await fetch_one(query, (pending_id,), connection=connection)
        return cls._row_to_submission(row)

    @classmethod
    async def list_by_status(
        cls,
        status: SubmissionStatus,
        limit: int,
        offset: int,
        source_url: str | None = None,
    ) -> list[PendingSubmission]:
        conditions = ["status = %s"]
        params: list = [str(status)]
        if source_url:
            conditions.append("source_url = %s")
            params.append(source_url)

        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM scraped_shows_pending
            WHERE {" AND ".join(conditions)}
            ORDER BY created_at DESC
            LIMIT %s OFFSET %s
        """
        rows = await fetch_all(query, (*params, limit, offset))
        return [cls._row_to_submission(row) for row in rows]

    @classmethod
    async def count_by_status(cls, status: SubmissionStatus, source_url: str | None = None) -> int:
        if source_url:
            query = "SELECT COUNT(*) FROM scraped_shows_pending WHERE status = %s AND source_url = %s"
            params: tuple = (str(status), source_url)
        else:
            query = "SELECT COUNT(*) FROM scraped_shows_pending WHERE status = %s"
            params = (str(status),)
        return int(await fetch_val(query, params) or 0)

    @classmethod
    async def mark_approved(
        cls,
        pending_id: str,
        admin_notes: str | None,
        *,
        connection: psycopg.AsyncConnection,
    ) -> None:
        query = """
            UPDATE scraped_shows_pending
            SET status = 'APPROVED',
                admin_notes = COALESCE(%s, admin_notes),
                reviewed_at = NOW()
            WHERE id = %s
        """
        await execute_query(query, (admin_notes, pending_id), connection=connection)
        logger.info("Pending submission approved", pending_id=pending_id)

    @classmethod
    async def mark_rejected(
        cls,
        pending_id: str,
        reason: str,
        *,
        connection: psycopg.AsyncConnection,
    ) -> None:
        query = """
            UPDATE scraped_shows_pending
            SET status = 'REJECTED',
                admin_notes = %s,
                reviewed_at = NOW()
            WHERE id = %s
        """
        await execute_query(query, (reason, pending_id), connection=connection)
        logger.info("Pending submission rejected", pending_id=pending_id)

    @classmethod
    async def replace_normalized(
        cls,
        pending_id: str,
        normalized_payload: dict,
        admin_notes: str | None,
        *,
        connection: psycopg.AsyncConnection,
    ) -> None:
        """Overwrite the admin-edited payload; status and reviewed_at are untouched."""
        query = """
            UPDATE scraped_shows_pending
            SET normalized_json = %s,
                admin_notes = COALESCE(%s, admin_notes)
            WHERE id = %s
        """
        await execute_query(
            query, (Jsonb(normalized_payload), admin_notes, pending_id), connection=connection
        )
        logger.info("Pending submission edited", pending_id=pending_id)
