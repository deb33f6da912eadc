"""
Admin workflow for shows published without usable coordinates.
"""

import math
import uuid
from typing import Any

from showfinder.db.helpers import DatabaseError
from showfinder.db.pool import db_pool
from showfinder.features.show_review.domain import ReviewResult
from showfinder.features.show_review.errors import NotFoundError, ShowReviewError, ValidationError
from showfinder.features.show_review.repository import CoordinateIssueRepository, ShowRepository
from showfinder.infrastructure.observability.logging import get_logger
from showfinder.utils.geo import is_valid_coordinate

logger = get_logger(__name__)


class CoordinateService:
    async def list_issues(self, page: int = 1, page_size: int = 20) -> dict[str, Any]:
        page = max(1, page)
        page_size = max(1, min(page_size, 100))
        issues, total = await CoordinateIssueRepository.list_open(page_size, (page - 1) * page_size)
        return {
            "data": [issue.to_dict() for issue in issues],
            "pagination": {
                "totalCount": total,
                "pageSize": page_size,
                "currentPage": page,
                "totalPages": math.ceil(max(total, 1) / page_size),
            },
        }

    async def fix_show_coordinates(
        self, show_id: str, latitude: float, longitude: float, admin_id: str | None = None
    ) -> ReviewResult:
        """Set a show's point and resolve its open issues. Requires an open issue."""
        try:
            try:
                show_id = str(uuid.UUID(str(show_id)))
            except ValueError:
                raise NotFoundError(f"Show with ID {show_id} not found") from None

            if not is_valid_coordinate(latitude, longitude):
                raise ValidationError(f"Invalid coordinates provided: lat={latitude}, lng={longitude}")

            async with db_pool.transaction() as conn:
                open_issues = await CoordinateIssueRepository.count_open_for_show(
                    show_id, connection=conn
                )
                if not open_issues:
                    raise NotFoundError(f"No open coordinate issue for show {show_id}")

                if not await ShowRepository.set_coordinates(
                    show_id, latitude, longitude, connection=conn
                ):
                    raise NotFoundError(f"Show with ID {show_id} not found")
                await CoordinateIssueRepository.resolve_open(show_id, admin_id, connection=conn)

        except ShowReviewError as e:
            logger.warning("Coordinate fix refused", show_id=show_id, error_code=e.code, error=e.message)
            return ReviewResult(success=False, error=e.message, error_code=e.code)

        except DatabaseError as e:
            logger.error("Coordinate fix failed", show_id=show_id, error=str(e))
            return ReviewResult(success=False, error=str(e), error_code="DATABASE_ERROR")

        logger.info("Show coordinates fixed", show_id=show_id, admin_id=admin_id)
        return ReviewResult(success=True, show_id=show_id, message="Coordinates updated")


coordinate_service = CoordinateService()
