from .show_query_repository import ShowQueryRepository

__all__ = ["ShowQueryRepository"]
