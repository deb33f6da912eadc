"""
Domain subpackage for the show review feature.
"""

from .models import (
    WEB_FORM_SOURCE,
    CoordinateIssue,
    CoordinateIssueType,
    DailyScheduleEntry,
    NormalizedShow,
    OrganizerSubmission,
    PendingSubmission,
    QualityScore,
    ReviewAction,
    ReviewResult,
    ScrapingSource,
    SubmissionStatus,
)
from .payload import UntrustedPayload

__all__ = [
    "WEB_FORM_SOURCE",
    "CoordinateIssue",
    "CoordinateIssueType",
    "DailyScheduleEntry",
    "NormalizedShow",
    "OrganizerSubmission",
    "PendingSubmission",
    "QualityScore",
    "ReviewAction",
    "ReviewResult",
    "ScrapingSource",
    "SubmissionStatus",
    "UntrustedPayload",
]
