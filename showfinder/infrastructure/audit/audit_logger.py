"""
AuditLogger - admin action trail for submission review.

Every approve, reject and edit writes one ``admin_feedback`` row plus a
structured log line.

Usage:
    from showfinder.infrastructure.audit import audit_logger

    async with db_pool.transaction() as conn:
        ...
        await audit_logger.log_admin_action(
            pending_id=pending_id,
            admin_id=admin_id,
            action="APPROVE",
            feedback=admin_notes,
            connection=conn,
        )

When a ``connection`` is given the row is part of the caller's transaction
and errors propagate so the transition rolls back with it. Without one the
write is best-effort and failures only produce an error log.
"""

from datetime import UTC, datetime
from uuid import UUID

import psycopg

from showfinder.db.pool import db_pool
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

INSERT_FEEDBACK = """
    INSERT INTO admin_feedback (pending_id, admin_id, action, feedback)
    VALUES (%s, %s, %s, %s)
"""


class AuditLogger:
    """
    Writes admin actions to:
    1. Database (admin_feedback table) - queryable per submission
    2. Structured logs (stdout) - real-time monitoring
    """

    @staticmethod
    async def log_admin_action(
        pending_id: str | UUID,
        admin_id: str | UUID | None,
        action: str,
        feedback: str | None = None,
        request_id: str | None = None,
        connection: psycopg.AsyncConnection | None = None,
    ) -> bool:
        """
        Record one admin action against a pending submission.

        Args:
            pending_id: Submission acted on
            admin_id: Admin user id from the JWT ``sub`` claim
            action: ``APPROVE``, ``REJECT`` or ``EDIT``
            feedback: Notes or rejection reason
            request_id: Request correlation ID for tracing
            connection: Transaction to join; errors propagate when given

        Returns:
            True if logged successfully, False if a standalone write failed
        """
        pending_id = str(pending_id)
        admin_id = str(admin_id) if admin_id else None

        logger.info(
            "Audit event",
            audit_action=action,
            pending_id=pending_id,
            admin_id=admin_id,
            request_id=request_id,
        )

        params = (pending_id, admin_id, action, feedback)

        if connection is not None:
            await connection.execute(INSERT_FEEDBACK, params)
            return True

        try:
            async with db_pool.connection() as conn:
                await conn.execute(INSERT_FEEDBACK, params)
            return True

        except Exception as e:
            logger.error(
                "Failed to write admin feedback row",
                error=str(e),
                error_type=type(e).__name__,
                action=action,
                pending_id=pending_id,
                # Enough context to recreate the row by hand
                fallback_data={
                    "pending_id": pending_id,
                    "admin_id": admin_id,
                    "action": action,
                    "feedback": feedback,
                    "timestamp": datetime.now(UTC).isoformat(),
                },
            )
            return False


# Global singleton instance
audit_logger = AuditLogger()
