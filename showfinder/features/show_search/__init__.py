"""
Show search feature package.

Paginated geo/date search and the show detail document, kept together as
one vertical slice (domain, repository, service, API router).
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as shows_router  # noqa: F401
from .services import ShowSearchService, show_search_service  # noqa: F401
