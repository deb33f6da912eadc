"""
Heuristic completeness score for pending submissions.

Shown next to each row in the admin review list so reviewers can triage
obviously broken scrapes first.
"""

import re

from showfinder.features.show_review.domain import QualityScore, UntrustedPayload

_YEAR_RE = re.compile(r"\d{4}")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_DAY_RANGE_RE = re.compile(r"\d{1,2}[-–]\d{1,2}")


def score_submission(payload: UntrustedPayload) -> QualityScore:
    issues: list[str] = []
    recommendations: list[str] = []
    score = 100

    if not payload.text("name"):
        issues.append("Missing name")
        recommendations.append("Reject with TITLE_MISSING feedback")
        score -= 30

    start = payload.text("startDate")
    has_schedule = bool(payload.array("dailySchedule"))
    if not start and not has_schedule:
        issues.append("Missing start date")
        recommendations.append("Reject with DATE_FORMAT feedback")
        score -= 30
    elif start and not _ISO_DATE_RE.match(start) and (
        _DAY_RANGE_RE.search(start) or not _YEAR_RE.search(start)
    ):
        issues.append("Date format issues")
        recommendations.append("Consider DATE_FORMAT feedback")

    if not payload.text("city"):
        issues.append("Missing city")
        recommendations.append("Reject with CITY_MISSING feedback")
        score -= 20

    if not payload.text("venueName") and not payload.text("address"):
        issues.append("Missing venue and address")
        recommendations.append("Reject with VENUE_MISSING feedback")
        score -= 20

    state = payload.text("state")
    if state and len(state) > 2:
        issues.append("State not in 2-letter format")
        recommendations.append("Approve with STATE_FULL feedback")
        score -= 5

    description = payload.text("description") or ""
    if "<" in description or "&nbsp;" in description or "&amp;" in description:
        issues.append("HTML artifacts in description")
        recommendations.append("Edit or approve with EXTRA_HTML feedback")
        score -= 5

    return QualityScore(score=max(score, 0), issues=issues, recommendations=recommendations)
