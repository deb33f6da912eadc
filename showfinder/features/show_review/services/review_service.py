"""
Admin review state machine for pending submissions.

PENDING -> APPROVED | REJECTED, plus EDIT as PENDING -> PENDING. Every
transition runs in one transaction with the submission row locked
(SELECT ... FOR UPDATE) so two concurrent approvals cannot both see
PENDING. Source-priority reinforcement runs in a savepoint and the
organizer notification is enqueued after commit; neither can undo the
transition.

Transitions return ``ReviewResult`` and never raise.
"""

from __future__ import annotations

import uuid
from typing import Any

import psycopg

from showfinder.db.helpers import DatabaseError
from showfinder.db.pool import db_pool
from showfinder.features.show_review.domain import (
    CoordinateIssueType,
    NormalizedShow,
    PendingSubmission,
    ReviewAction,
    ReviewResult,
    SubmissionStatus,
    UntrustedPayload,
)
from showfinder.features.show_review.errors import (
    InvalidStateError,
    NotFoundError,
    ShowReviewError,
    ValidationError,
)
from showfinder.features.show_review.normalizer import ensure_single_timezone, normalize_submission
from showfinder.features.show_review.priority import APPROVE_DELTA, REJECT_DELTA
from showfinder.features.show_review.quality import score_submission
from showfinder.features.show_review.repository import (
    CoordinateIssueRepository,
    OrganizerSubmissionRepository,
    ScrapingSourceRepository,
    ShowRepository,
    SubmissionRepository,
)
from showfinder.features.show_review.services.notification_service import notification_service
from showfinder.infrastructure.audit import audit_logger
from showfinder.infrastructure.observability.logging import get_logger
from showfinder.utils.geo import is_valid_coordinate

logger = get_logger(__name__)


def coerce_pending_id(pending_id: Any) -> str:
    """Ids are UUIDs; anything else cannot exist."""
    try:
        return str(uuid.UUID(str(pending_id)))
    except (TypeError, ValueError):
        raise NotFoundError("Pending show not found", pending_id=str(pending_id)) from None


def _ensure_pending(submission: PendingSubmission | None, pending_id: str) -> PendingSubmission:
    if submission is None:
        raise NotFoundError("Pending show not found", pending_id=pending_id)
    if submission.status != SubmissionStatus.PENDING:
        raise InvalidStateError(f"Show already {submission.status}", pending_id=pending_id)
    return submission


class ShowReviewService:
    MAX_LIST_LIMIT = 200

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def approve(
        self,
        pending_id: str,
        admin_id: str | None = None,
        admin_notes: str | None = None,
    ) -> ReviewResult:
        """
        Publish a pending submission as a show.

        Inserts the show, or updates the existing row with the same
        (title, start date, location).
        """
        try:
            pending_id = coerce_pending_id(pending_id)

            async with db_pool.transaction() as conn:
                submission = await SubmissionRepository.load(
                    pending_id, for_update=True, connection=conn
                )
                submission = _ensure_pending(submission, pending_id)

                geocoded = (
                    UntrustedPayload.from_json(submission.geocoded_payload)
                    if submission.geocoded_payload
                    else None
                )
                payload = UntrustedPayload.from_json(submission.effective_payload)
                show = normalize_submission(payload, geocoded)

                show_id = await self._upsert_show(show, pending_id, conn)

                await SubmissionRepository.mark_approved(pending_id, admin_notes, connection=conn)

                organizer = await OrganizerSubmissionRepository.find_by_pending_id(
                    pending_id, connection=conn
                )
                if organizer:
                    await OrganizerSubmissionRepository.link_approved_show(
                        pending_id, show_id, connection=conn
                    )

                await audit_logger.log_admin_action(
                    pending_id=pending_id,
                    admin_id=admin_id,
                    action=ReviewAction.APPROVE,
                    feedback=admin_notes,
                    connection=conn,
                )

                if submission.is_scraped:
                    await self._adjust_source_priority(
                        conn, submission.source_url, APPROVE_DELTA, pending_id
                    )

        except ShowReviewError as e:
            logger.warning("Approval refused", pending_id=pending_id, error_code=e.code, error=e.message)
            return ReviewResult(success=False, error=e.message, error_code=e.code)

        except DatabaseError as e:
            logger.error("Approval failed", pending_id=pending_id, operation=e.operation, error=str(e))
            return ReviewResult(success=False, error=f"Failed to approve show: {e}", error_code="DATABASE_ERROR")

        except Exception as e:
            logger.exception("Unexpected approval error", pending_id=pending_id)
            return ReviewResult(success=False, error=f"Unexpected error: {e}", error_code="INTERNAL_ERROR")

        logger.info("Show approved", pending_id=pending_id, show_id=show_id, admin_id=admin_id)

        # After commit: the approval stands whether or not this succeeds
        recipient = organizer.organizer_email if organizer else show.organizer_email
        email_queued = False
        if recipient:
            email_queued = await notification_service.enqueue_approval(
                organizer_email=recipient,
                organizer_name=organizer.organizer_name if organizer else show.organizer_name,
                show_id=show_id,
                show_title=show.title,
                start_date=show.start_date,
                pending_id=pending_id,
            )

        return ReviewResult(
            success=True,
            show_id=show_id,
            message="Show approved and published",
            email_queued=email_queued,
        )

    async def reject(self, pending_id: str, reason: str | None, admin_id: str | None = None) -> ReviewResult:
        try:
            if not reason or not reason.strip():
                raise ValidationError("A rejection reason is required")
            reason = reason.strip()
            pending_id = coerce_pending_id(pending_id)

            async with db_pool.transaction() as conn:
                submission = await SubmissionRepository.load(
                    pending_id, for_update=True, connection=conn
                )
                submission = _ensure_pending(submission, pending_id)

                await SubmissionRepository.mark_rejected(pending_id, reason, connection=conn)
                await OrganizerSubmissionRepository.mark_rejected(pending_id, reason, connection=conn)
                await audit_logger.log_admin_action(
                    pending_id=pending_id,
                    admin_id=admin_id,
                    action=ReviewAction.REJECT,
                    feedback=reason,
                    connection=conn,
                )

                if submission.is_scraped:
                    await self._adjust_source_priority(
                        conn, submission.source_url, REJECT_DELTA, pending_id
                    )

        except ShowReviewError as e:
            logger.warning("Rejection refused", pending_id=pending_id, error_code=e.code, error=e.message)
            return ReviewResult(success=False, error=e.message, error_code=e.code)

        except DatabaseError as e:
            logger.error("Rejection failed", pending_id=pending_id, operation=e.operation, error=str(e))
            return ReviewResult(success=False, error=f"Failed to reject show: {e}", error_code="DATABASE_ERROR")

        except Exception as e:
            logger.exception("Unexpected rejection error", pending_id=pending_id)
            return ReviewResult(success=False, error=f"Unexpected error: {e}", error_code="INTERNAL_ERROR")

        logger.info("Show rejected", pending_id=pending_id, admin_id=admin_id)
        return ReviewResult(success=True, message="Show rejected")

    async def edit(
        self,
        pending_id: str,
        normalized_payload: Any,
        admin_notes: str | None = None,
        admin_id: str | None = None,
    ) -> ReviewResult:
        """Replace the admin-edited payload. Status and reviewed_at stay as they are."""
        try:
            payload = UntrustedPayload(normalized_payload)
            if not payload.is_object:
                raise ValidationError("normalizedPayload must be a JSON object")
            ensure_single_timezone(payload)
            pending_id = coerce_pending_id(pending_id)

            async with db_pool.transaction() as conn:
                submission = await SubmissionRepository.load(
                    pending_id, for_update=True, connection=conn
                )
                _ensure_pending(submission, pending_id)

                await SubmissionRepository.replace_normalized(
                    pending_id, payload.to_dict(), admin_notes, connection=conn
                )
                await audit_logger.log_admin_action(
                    pending_id=pending_id,
                    admin_id=admin_id,
                    action=ReviewAction.EDIT,
                    feedback=admin_notes,
                    connection=conn,
                )

        except ShowReviewError as e:
            logger.warning("Edit refused", pending_id=pending_id, error_code=e.code, error=e.message)
            return ReviewResult(success=False, error=e.message, error_code=e.code)

        except DatabaseError as e:
            logger.error("Edit failed", pending_id=pending_id, operation=e.operation, error=str(e))
            return ReviewResult(success=False, error=f"Failed to edit show: {e}", error_code="DATABASE_ERROR")

        except Exception as e:
            logger.exception("Unexpected edit error", pending_id=pending_id)
            return ReviewResult(success=False, error=f"Unexpected error: {e}", error_code="INTERNAL_ERROR")

        return ReviewResult(success=True, message="Pending show updated")

    async def batch_review(
        self,
        action: ReviewAction,
        pending_ids: list[str],
        notes: str | None = None,
        admin_id: str | None = None,
    ) -> dict[str, Any]:
        """Approve or reject each id in its own transaction."""
        if action not in (ReviewAction.APPROVE, ReviewAction.REJECT):
            raise ValidationError(f"Unsupported batch action: {action}")

        results = []
        for pending_id in dict.fromkeys(pending_ids):
            if action == ReviewAction.APPROVE:
                result = await self.approve(pending_id, admin_id=admin_id, admin_notes=notes)
            else:
                result = await self.reject(pending_id, reason=notes, admin_id=admin_id)
            results.append({"pendingId": pending_id, **result.to_dict()})

        succeeded = sum(1 for item in results if item["success"])
        logger.info(
            "Batch review finished",
            action=str(action),
            requested=len(results),
            succeeded=succeeded,
        )
        return {
            "action": str(action),
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "results": results,
        }

    # =========================================================================
    # LISTING
    # =========================================================================

    async def list_submissions(
        self,
        status: SubmissionStatus = SubmissionStatus.PENDING,
        limit: int = 50,
        offset: int = 0,
        source_url: str | None = None,
        min_score: int = 0,
        max_score: int = 100,
    ) -> dict[str, Any]:
        """
        Page of submissions newest first, each with a quality score.

        Score bounds filter the fetched page only; ``totalCount`` counts the
        status (and source) filter.
        """
        limit = max(1, min(limit, self.MAX_LIST_LIMIT))
        offset = max(0, offset)

        submissions = await SubmissionRepository.list_by_status(status, limit, offset, source_url)
        total = await SubmissionRepository.count_by_status(status, source_url)

        data = []
        for submission in submissions:
            quality = score_submission(UntrustedPayload.from_json(submission.effective_payload))
            if not min_score <= quality.score <= max_score:
                continue
            row = submission.to_dict()
            row["quality"] = {
                "score": quality.score,
                "issues": quality.issues,
                "recommendations": quality.recommendations,
            }
            data.append(row)

        return {
            "data": data,
            "pagination": {"totalCount": total, "limit": limit, "offset": offset},
        }

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _upsert_show(
        self, show: NormalizedShow, pending_id: str, conn: psycopg.AsyncConnection
    ) -> str:
        existing_id = await ShowRepository.find_by_natural_key(
            show.title, show.start_date, show.location, connection=conn
        )
        if existing_id:
            stored = await ShowRepository.update(existing_id, show, connection=conn)
        else:
            try:
                async with conn.transaction():
                    stored = await ShowRepository.insert(show, connection=conn)
            except DatabaseError as e:
                if not isinstance(e.__cause__, psycopg.errors.UniqueViolation):
                    raise
                # Another approval published the same show after our lookup
                existing_id = await ShowRepository.find_by_natural_key(
                    show.title, show.start_date, show.location, connection=conn
                )
                if not existing_id:
                    raise
                logger.info("Show insert lost natural key race", pending_id=pending_id, show_id=existing_id)
                stored = await ShowRepository.update(existing_id, show, connection=conn)

        show_id = stored["id"]
        if not is_valid_coordinate(stored.get("latitude"), stored.get("longitude")):
            await CoordinateIssueRepository.log_issue(
                show_id,
                str(show.coordinate_issue or CoordinateIssueType.NULL_COORDINATES),
                show.raw_latitude,
                show.raw_longitude,
                connection=conn,
            )

        logger.info(
            "Show upserted",
            pending_id=pending_id,
            show_id=show_id,
            updated_existing=bool(existing_id),
        )
        return show_id

    async def _adjust_source_priority(
        self, conn: psycopg.AsyncConnection, source_url: str, delta: int, pending_id: str
    ) -> None:
        """Best-effort; a failure rolls back only the savepoint."""
        try:
            async with conn.transaction():
                await ScrapingSourceRepository.apply_priority_delta(source_url, delta, connection=conn)
        except Exception as e:
            logger.warning(
                "Source priority update failed",
                pending_id=pending_id,
                source_url=source_url,
                delta=delta,
                error=str(e),
            )


show_review_service = ShowReviewService()
