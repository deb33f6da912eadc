from .coordinate_issue_repository import CoordinateIssueRepository
from .organizer_submission_repository import (
    OrganizerSubmissionRepository,
    OrganizerSubmissionRepositoryError,
)
from .scraping_source_repository import ScrapingSourceRepository
from .show_repository import ShowRepository, ShowRepositoryError
from .submission_repository import SubmissionRepository, SubmissionRepositoryError

__all__ = [
    "CoordinateIssueRepository",
    "OrganizerSubmissionRepository",
    "OrganizerSubmissionRepositoryError",
    "ScrapingSourceRepository",
    "ShowRepository",
    "ShowRepositoryError",
    "SubmissionRepository",
    "SubmissionRepositoryError",
]
