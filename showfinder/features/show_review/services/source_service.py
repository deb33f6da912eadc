"""
Admin maintenance of the scraping source registry.
"""

from showfinder.features.show_review.domain import ScrapingSource
from showfinder.features.show_review.errors import NotFoundError, ValidationError
from showfinder.features.show_review.priority import MAX_PRIORITY, MIN_PRIORITY
from showfinder.features.show_review.repository import ScrapingSourceRepository
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class SourceService:
    async def list_sources(self, enabled: bool | None = None) -> list[ScrapingSource]:
        return await ScrapingSourceRepository.list_sources(enabled)

    async def update_source(
        self,
        url: str,
        priority_score: int | None = None,
        enabled: bool | None = None,
        notes: str | None = None,
    ) -> ScrapingSource:
        if priority_score is not None and not MIN_PRIORITY <= priority_score <= MAX_PRIORITY:
            raise ValidationError(f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")

        source = await ScrapingSourceRepository.update_source(url, priority_score, enabled, notes)
        if source is None:
            raise NotFoundError(f"Scraping source not found: {url}")
        return source


source_service = SourceService()
