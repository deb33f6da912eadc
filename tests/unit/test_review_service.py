from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import psycopg
import pytest

from showfinder.db.helpers import DatabaseError
from showfinder.features.show_review.domain import (
    OrganizerSubmission,
    PendingSubmission,
    ReviewAction,
    SubmissionStatus,
)
from showfinder.features.show_review.repository import (
    CoordinateIssueRepository,
    OrganizerSubmissionRepository,
    ScrapingSourceRepository,
    ShowRepository,
    SubmissionRepository,
)
from showfinder.features.show_review.services import notification_service
from showfinder.features.show_review.services.review_service import ShowReviewService
from showfinder.infrastructure.audit import audit_logger

PENDING_ID = "3d0f7a4e-8b0c-4c55-9a53-1f2e3d4c5b6a"
OTHER_ID = "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"
SHOW_ID = "1b2c3d4e-5f60-4172-8394-a5b6c7d8e9f0"
SOURCE_URL = "https://cardshows.example.com/calendar"

PAYLOAD = {
    "name": "Fall Classic",
    "startDate": "2025-10-04",
    "city": "Austin",
    "state": "TX",
    "venueName": "Expo Hall",
    "lat": 30.27,
    "lng": -97.74,
    "organizerEmail": "payload@example.com",
}


def _submission(status=SubmissionStatus.PENDING, source_url=SOURCE_URL, payload=None):
    return PendingSubmission(
        id=PENDING_ID,
        source_url=source_url,
        raw_payload=payload if payload is not None else dict(PAYLOAD),
        normalized_payload=None,
        geocoded_payload=None,
        status=status,
        admin_notes=None,
        created_at=datetime(2025, 9, 1, tzinfo=UTC),
        reviewed_at=None,
    )


def _organizer():
    return OrganizerSubmission(
        id="org-1",
        organizer_name="Pat",
        organizer_email="pat@example.com",
        pending_show_id=PENDING_ID,
        approved_show_id=None,
        status="PENDING",
        submitted_at=None,
    )


@pytest.fixture
def repos(monkeypatch, fake_conn):
    mocks = SimpleNamespace(
        load=AsyncMock(return_value=_submission()),
        mark_approved=AsyncMock(),
        mark_rejected=AsyncMock(),
        replace_normalized=AsyncMock(),
        find_show=AsyncMock(return_value=None),
        insert_show=AsyncMock(return_value={"id": SHOW_ID, "latitude": 30.27, "longitude": -97.74}),
        update_show=AsyncMock(return_value={"id": SHOW_ID, "latitude": None, "longitude": None}),
        log_issue=AsyncMock(),
        find_organizer=AsyncMock(return_value=_organizer()),
        link_show=AsyncMock(),
        reject_organizer=AsyncMock(),
        priority=AsyncMock(return_value=52),
        audit=AsyncMock(return_value=True),
        enqueue=AsyncMock(return_value=True),
        conn=fake_conn,
    )
    monkeypatch.setattr(SubmissionRepository, "load", mocks.load)
    monkeypatch.setattr(SubmissionRepository, "mark_approved", mocks.mark_approved)
    monkeypatch.setattr(SubmissionRepository, "mark_rejected", mocks.mark_rejected)
    monkeypatch.setattr(SubmissionRepository, "replace_normalized", mocks.replace_normalized)
    monkeypatch.setattr(ShowRepository, "find_by_natural_key", mocks.find_show)
    monkeypatch.setattr(ShowRepository, "insert", mocks.insert_show)
    monkeypatch.setattr(ShowRepository, "update", mocks.update_show)
    monkeypatch.setattr(CoordinateIssueRepository, "log_issue", mocks.log_issue)
    monkeypatch.setattr(OrganizerSubmissionRepository, "find_by_pending_id", mocks.find_organizer)
    monkeypatch.setattr(OrganizerSubmissionRepository, "link_approved_show", mocks.link_show)
    monkeypatch.setattr(OrganizerSubmissionRepository, "mark_rejected", mocks.reject_organizer)
    monkeypatch.setattr(ScrapingSourceRepository, "apply_priority_delta", mocks.priority)
    monkeypatch.setattr(audit_logger, "log_admin_action", mocks.audit)
    monkeypatch.setattr(notification_service, "enqueue_approval", mocks.enqueue)
    return mocks


# =============================================================================
# APPROVE
# =============================================================================


@pytest.mark.asyncio
async def test_approve_publishes_show_and_notifies_organizer(repos):
    result = await ShowReviewService().approve(PENDING_ID, admin_id="admin-1", admin_notes="looks good")

    assert result.success is True
    assert result.show_id == SHOW_ID
    assert result.message == "Show approved and published"
    assert result.email_queued is True

    repos.insert_show.assert_awaited_once()
    inserted = repos.insert_show.await_args.args[0]
    assert inserted.title == "Fall Classic"
    assert inserted.location == "Expo Hall"

    repos.mark_approved.assert_awaited_once_with(PENDING_ID, "looks good", connection=repos.conn)
    repos.link_show.assert_awaited_once_with(PENDING_ID, SHOW_ID, connection=repos.conn)
    assert repos.audit.await_args.kwargs["action"] == ReviewAction.APPROVE
    repos.priority.assert_awaited_once_with(SOURCE_URL, 2, connection=repos.conn)
    assert repos.conn.savepoints == 2
    repos.log_issue.assert_not_awaited()

    assert repos.enqueue.await_args.kwargs["organizer_email"] == "pat@example.com"
    assert repos.conn.committed is True


@pytest.mark.asyncio
async def test_approve_already_processed_writes_nothing(repos):
    repos.load.return_value = _submission(status=SubmissionStatus.APPROVED)

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.success is False
    assert result.error == "Show already APPROVED"
    assert result.error_code == "ALREADY_PROCESSED"
    repos.insert_show.assert_not_awaited()
    repos.mark_approved.assert_not_awaited()
    repos.enqueue.assert_not_awaited()


@pytest.mark.asyncio
async def test_approve_missing_submission(repos):
    repos.load.return_value = None

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.error_code == "NOT_FOUND"
    assert result.error == "Pending show not found"


@pytest.mark.asyncio
async def test_approve_malformed_id_never_hits_database(repos):
    result = await ShowReviewService().approve("definitely-not-a-uuid")

    assert result.error_code == "NOT_FOUND"
    repos.load.assert_not_awaited()


@pytest.mark.asyncio
async def test_approve_updates_existing_show_and_logs_coordinate_issue(repos):
    repos.load.return_value = _submission(payload={**PAYLOAD, "lat": None, "lng": None})
    repos.find_show.return_value = SHOW_ID

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.success is True
    repos.update_show.assert_awaited_once()
    repos.insert_show.assert_not_awaited()
    repos.log_issue.assert_awaited_once()
    assert repos.log_issue.await_args.args[:2] == (SHOW_ID, "NULL_COORDINATES")


@pytest.mark.asyncio
async def test_approve_survives_priority_failure(repos):
    repos.priority.side_effect = DatabaseError("lock timeout", operation="fetch_one")

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.success is True
    repos.mark_approved.assert_awaited_once()


@pytest.mark.asyncio
async def test_approve_survives_notification_failure(repos):
    repos.enqueue.return_value = False

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.success is True
    assert result.email_queued is False


@pytest.mark.asyncio
async def test_web_form_approval_skips_priority_and_uses_payload_email(repos):
    repos.load.return_value = _submission(source_url="web-form")
    repos.find_organizer.return_value = None

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.success is True
    repos.priority.assert_not_awaited()
    repos.link_show.assert_not_awaited()
    assert repos.enqueue.await_args.kwargs["organizer_email"] == "payload@example.com"


@pytest.mark.asyncio
async def test_approve_database_failure_reports_error(repos):
    repos.insert_show.side_effect = DatabaseError("insert failed", operation="fetch_one")

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.success is False
    assert result.error_code == "DATABASE_ERROR"
    repos.mark_approved.assert_not_awaited()
    repos.enqueue.assert_not_awaited()


@pytest.mark.asyncio
async def test_approve_updates_show_inserted_concurrently(repos):
    duplicate = DatabaseError("Query failed: duplicate key", operation="fetch_one")
    duplicate.__cause__ = psycopg.errors.UniqueViolation("duplicate key value violates unique constraint")
    repos.insert_show.side_effect = duplicate
    repos.find_show.side_effect = [None, SHOW_ID]
    repos.update_show.return_value = {"id": SHOW_ID, "latitude": 30.27, "longitude": -97.74}

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.success is True
    assert result.show_id == SHOW_ID
    assert repos.find_show.await_count == 2
    assert repos.update_show.await_args.args[0] == SHOW_ID
    repos.mark_approved.assert_awaited_once()


@pytest.mark.asyncio
async def test_approve_unparseable_payload_is_validation_error(repos):
    repos.load.return_value = _submission(payload={"name": "No date"})

    result = await ShowReviewService().approve(PENDING_ID)

    assert result.error_code == "VALIDATION_ERROR"
    repos.insert_show.assert_not_awaited()


# =============================================================================
# REJECT / EDIT
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", [None, "", "   "])
async def test_reject_requires_reason(repos, reason):
    result = await ShowReviewService().reject(PENDING_ID, reason)

    assert result.success is False
    assert result.error == "A rejection reason is required"
    repos.load.assert_not_awaited()


@pytest.mark.asyncio
async def test_reject_lowers_source_priority(repos):
    result = await ShowReviewService().reject(PENDING_ID, " duplicate listing ", admin_id="admin-1")

    assert result.success is True
    repos.mark_rejected.assert_awaited_once_with(PENDING_ID, "duplicate listing", connection=repos.conn)
    repos.reject_organizer.assert_awaited_once()
    repos.priority.assert_awaited_once_with(SOURCE_URL, -3, connection=repos.conn)
    assert repos.audit.await_args.kwargs["action"] == ReviewAction.REJECT


@pytest.mark.asyncio
async def test_reject_already_rejected(repos):
    repos.load.return_value = _submission(status=SubmissionStatus.REJECTED)

    result = await ShowReviewService().reject(PENDING_ID, "spam")

    assert result.error == "Show already REJECTED"
    repos.mark_rejected.assert_not_awaited()


@pytest.mark.asyncio
async def test_edit_replaces_normalized_payload(repos):
    edited = {**PAYLOAD, "name": "Fall Classic 2025"}

    result = await ShowReviewService().edit(PENDING_ID, edited, admin_notes="fixed title")

    assert result.success is True
    repos.replace_normalized.assert_awaited_once_with(
        PENDING_ID, edited, "fixed title", connection=repos.conn
    )
    assert repos.audit.await_args.kwargs["action"] == ReviewAction.EDIT


@pytest.mark.asyncio
async def test_edit_rejects_non_object(repos):
    result = await ShowReviewService().edit(PENDING_ID, ["not", "an", "object"])

    assert result.error_code == "VALIDATION_ERROR"
    repos.replace_normalized.assert_not_awaited()


@pytest.mark.asyncio
async def test_edit_rejects_mixed_timezones(repos):
    edited = {
        "name": "Split",
        "dailySchedule": [
            {"date": "2025-10-04", "timezone": "America/Chicago"},
            {"date": "2025-10-05", "timezone": "America/Denver"},
        ],
    }

    result = await ShowReviewService().edit(PENDING_ID, edited)

    assert result.error_code == "VALIDATION_ERROR"


# =============================================================================
# BATCH / LIST
# =============================================================================


@pytest.mark.asyncio
async def test_batch_review_reports_each_outcome(repos):
    repos.load.side_effect = [_submission(), _submission(status=SubmissionStatus.APPROVED)]

    summary = await ShowReviewService().batch_review(ReviewAction.APPROVE, [PENDING_ID, OTHER_ID, PENDING_ID])

    assert summary["action"] == "APPROVE"
    assert summary["succeeded"] == 1
    assert summary["failed"] == 1
    assert [item["pendingId"] for item in summary["results"]] == [PENDING_ID, OTHER_ID]
    assert summary["results"][1]["errorCode"] == "ALREADY_PROCESSED"


@pytest.mark.asyncio
async def test_list_submissions_filters_by_quality(monkeypatch):
    complete = _submission()
    sparse = _submission(payload={"state": "Texas"})
    monkeypatch.setattr(SubmissionRepository, "list_by_status", AsyncMock(return_value=[complete, sparse]))
    monkeypatch.setattr(SubmissionRepository, "count_by_status", AsyncMock(return_value=2))

    result = await ShowReviewService().list_submissions(min_score=50)

    assert len(result["data"]) == 1
    assert result["data"][0]["quality"]["score"] == 100
    assert result["pagination"] == {"totalCount": 2, "limit": 50, "offset": 0}
