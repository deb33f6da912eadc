from .search_service import ShowSearchService, show_search_service

__all__ = ["ShowSearchService", "show_search_service"]
