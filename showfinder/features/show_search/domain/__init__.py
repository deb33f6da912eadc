"""
Domain subpackage for show discovery.
"""

from .models import (
    ACTIVE_PARTICIPATION,
    DEALER_ROLE_ORDER,
    ParticipatingDealer,
    SearchFilters,
    build_pagination,
    has_features,
    overlaps_window,
    profile_to_dict,
    resolve_display_name,
    select_dealers,
    show_to_dict,
)

__all__ = [
    "ACTIVE_PARTICIPATION",
    "DEALER_ROLE_ORDER",
    "ParticipatingDealer",
    "SearchFilters",
    "build_pagination",
    "has_features",
    "overlaps_window",
    "profile_to_dict",
    "resolve_display_name",
    "select_dealers",
    "show_to_dict",
]
