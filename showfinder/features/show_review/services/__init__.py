from .coordinate_service import CoordinateService, coordinate_service
from .intake_service import IntakeService, intake_service
from .notification_service import NotificationService, notification_service
from .review_service import ShowReviewService, show_review_service
from .source_service import SourceService, source_service

__all__ = [
    "CoordinateService",
    "IntakeService",
    "NotificationService",
    "ShowReviewService",
    "SourceService",
    "coordinate_service",
    "intake_service",
    "notification_service",
    "show_review_service",
    "source_service",
]
