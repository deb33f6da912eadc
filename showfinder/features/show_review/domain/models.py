"""
Domain models for the show review feature.

Plain dataclasses shared by repositories, the normalizer and the review
service. They carry no persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any

WEB_FORM_SOURCE = "web-form"


class SubmissionStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXTRACT_ERROR = "EXTRACT_ERROR"
    GEOCODE_ERROR = "GEOCODE_ERROR"
    DUPLICATE = "DUPLICATE"


class ReviewAction(StrEnum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    EDIT = "EDIT"


class CoordinateIssueType(StrEnum):
    NULL_COORDINATES = "NULL_COORDINATES"
    INVALID_COORDINATES = "INVALID_COORDINATES"


@dataclass(slots=True)
class PendingSubmission:
    """A scraped_shows_pending row awaiting (or past) admin review."""

    id: str
    source_url: str
    raw_payload: dict[str, Any]
    normalized_payload: dict[str, Any] | None
    geocoded_payload: dict[str, Any] | None
    status: SubmissionStatus
    admin_notes: str | None
    created_at: datetime | None
    reviewed_at: datetime | None

    @property
    def effective_payload(self) -> dict[str, Any]:
        """Admin-edited payload wins over the payload as received."""
        if self.normalized_payload is not None:
            return self.normalized_payload
        return self.raw_payload

    @property
    def is_scraped(self) -> bool:
        return bool(self.source_url) and self.source_url != WEB_FORM_SOURCE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sourceUrl": self.source_url,
            "rawPayload": self.raw_payload,
            "normalizedPayload": self.normalized_payload,
            "geocodedPayload": self.geocoded_payload,
            "status": str(self.status),
            "adminNotes": self.admin_notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
        }


@dataclass(slots=True)
class DailyScheduleEntry:
    """One normalized day of a multi-day schedule."""

    date: str
    start_time: str
    end_time: str
    timezone: str
    notes: str = ""
    starts_at: datetime | None = None
    ends_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "timezone": self.timezone,
            "notes": self.notes,
        }


@dataclass(slots=True)
class NormalizedShow:
    """Canonical show fields derived from a submission payload."""

    title: str
    location: str
    address: str
    start_date: datetime
    end_date: datetime
    timezone: str
    description: str | None = None
    daily_schedule: list[DailyScheduleEntry] = field(default_factory=list)
    entry_fee: Decimal | None = None
    image_url: str | None = None
    website_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    coordinate_issue: CoordinateIssueType | None = None
    raw_latitude: float | None = None
    raw_longitude: float | None = None
    features: list[Any] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    organizer_name: str | None = None
    organizer_email: str | None = None

    @property
    def schedule_json(self) -> list[dict[str, Any]] | None:
        if not self.daily_schedule:
            return None
        return [entry.to_json() for entry in self.daily_schedule]


@dataclass(slots=True)
class OrganizerSubmission:
    """Mailing-list record linking an organizer to a pending submission."""

    id: str
    organizer_name: str
    organizer_email: str
    pending_show_id: str | None
    approved_show_id: str | None
    status: str
    submitted_at: datetime | None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "organizerName": self.organizer_name,
            "organizerEmail": self.organizer_email,
            "pendingShowId": self.pending_show_id,
            "approvedShowId": self.approved_show_id,
            "status": self.status,
            "submittedAt": self.submitted_at.isoformat() if self.submitted_at else None,
            "notes": self.notes,
        }


@dataclass(slots=True)
class ScrapingSource:
    url: str
    priority_score: int
    enabled: bool
    error_streak: int = 0
    last_success_at: datetime | None = None
    last_error_at: datetime | None = None
    notes: str | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "priorityScore": self.priority_score,
            "enabled": self.enabled,
            "errorStreak": self.error_streak,
            "lastSuccessAt": self.last_success_at.isoformat() if self.last_success_at else None,
            "lastErrorAt": self.last_error_at.isoformat() if self.last_error_at else None,
            "notes": self.notes,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(slots=True)
class CoordinateIssue:
    id: str
    show_id: str
    issue_type: str
    latitude: float | None
    longitude: float | None
    created_at: datetime | None
    show_title: str | None = None
    resolved_at: datetime | None = None
    resolved_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "showId": self.show_id,
            "showTitle": self.show_title,
            "issueType": self.issue_type,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "resolvedAt": self.resolved_at.isoformat() if self.resolved_at else None,
            "resolvedBy": self.resolved_by,
        }


@dataclass(slots=True)
class QualityScore:
    """Heuristic 0-100 completeness score shown next to pending rows."""

    score: int
    issues: list[str]
    recommendations: list[str]


@dataclass(slots=True)
class ReviewResult:
    """Outcome of an admin transition. Callers branch on ``success``."""

    success: bool
    show_id: str | None = None
    error: str | None = None
    error_code: str | None = None
    message: str | None = None
    email_queued: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.show_id:
            payload["showId"] = self.show_id
        if self.message:
            payload["message"] = self.message
        if self.success:
            payload["emailQueued"] = self.email_queued
        else:
            payload["error"] = self.error
            payload["errorCode"] = self.error_code
        return payload
