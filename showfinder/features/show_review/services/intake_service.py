"""
Submission intake and the organizer mailing list.
"""

from typing import Any

from showfinder.db.pool import db_pool
from showfinder.features.show_review.domain import WEB_FORM_SOURCE, UntrustedPayload
from showfinder.features.show_review.errors import ValidationError
from showfinder.features.show_review.normalizer import ensure_single_timezone
from showfinder.features.show_review.repository import (
    OrganizerSubmissionRepository,
    SubmissionRepository,
)
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MAILING_LIST_STATUSES = {"PENDING", "APPROVED", "REJECTED"}


class IntakeService:
    async def submit_pending_show(
        self,
        raw_payload: Any,
        source_url: str | None = None,
        organizer_name: str | None = None,
        organizer_email: str | None = None,
    ) -> str:
        """
        Store a new PENDING submission and return its id.

        A mailing-list record is written in the same transaction when the
        organizer left an email address.

        Raises:
            ValidationError: payload is not an object or mixes schedule timezones
        """
        payload = UntrustedPayload(raw_payload)
        if not payload.is_object:
            raise ValidationError("rawPayload must be a JSON object")
        ensure_single_timezone(payload)

        source_url = (source_url or "").strip() or WEB_FORM_SOURCE
        organizer_email = (organizer_email or "").strip() or payload.text("organizerEmail")
        organizer_name = (organizer_name or "").strip() or payload.text("organizerName")

        async with db_pool.transaction() as conn:
            submission = await SubmissionRepository.create(
                source_url, payload.to_dict(), connection=conn
            )
            if organizer_email:
                await OrganizerSubmissionRepository.create(
                    organizer_name or "",
                    organizer_email,
                    submission.id,
                    connection=conn,
                )

        logger.info(
            "Show submitted for review",
            pending_id=submission.id,
            source_url=source_url,
            has_organizer=bool(organizer_email),
        )
        return submission.id

    async def get_mailing_list(
        self, status: str | None = None, limit: int = 50, offset: int = 0
    ) -> dict[str, Any]:
        if status is not None:
            status = status.upper()
            if status not in MAILING_LIST_STATUSES:
                raise ValidationError(f"Unknown mailing-list status: {status}")

        limit = max(1, min(limit, 500))
        offset = max(0, offset)
        records, total = await OrganizerSubmissionRepository.list_records(status, limit, offset)
        return {
            "data": [record.to_dict() for record in records],
            "pagination": {"totalCount": total, "limit": limit, "offset": offset},
        }


intake_service = IntakeService()
