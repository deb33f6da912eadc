"""
Show review feature package.

Intake, normalization and the admin approval workflow for pending show
submissions live together in this slice (domain models, repositories,
services, API routers).
"""

# Re-export the primary building blocks for easy access.
from .api.router import admin_router as review_admin_router  # noqa: F401
from .api.router import router as submissions_router  # noqa: F401
from .normalizer import normalize_submission  # noqa: F401
from .services import intake_service, show_review_service  # noqa: F401
