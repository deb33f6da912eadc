"""
Request and response bodies for the review API.

Wire names are camelCase to match the mobile and web clients.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# REQUESTS
# =============================================================================


class SubmitShowRequest(CamelModel):
    """Public submission form or scraper intake."""

    source_url: str | None = Field(None, max_length=2048)
    raw_payload: dict[str, Any] = Field(..., description="Show data as received")
    organizer_name: str | None = Field(None, max_length=200)
    organizer_email: str | None = Field(None, max_length=320, pattern=EMAIL_PATTERN)


class EditPendingShowRequest(CamelModel):
    normalized_payload: dict[str, Any]
    admin_notes: str | None = Field(None, max_length=2000)


class ApproveRequest(CamelModel):
    admin_notes: str | None = Field(None, max_length=2000)


class RejectRequest(CamelModel):
    reason: str = Field(..., max_length=2000)


class BatchReviewRequest(CamelModel):
    action: Literal["APPROVE", "REJECT"]
    pending_ids: list[str] = Field(..., min_length=1, max_length=100)
    notes: str | None = Field(None, max_length=2000)


class UpdateSourceRequest(CamelModel):
    url: str = Field(..., min_length=1)
    priority_score: int | None = Field(None, alias="priority")
    enabled: bool | None = None
    notes: str | None = Field(None, max_length=2000)


class FixCoordinatesRequest(CamelModel):
    latitude: float
    longitude: float


# =============================================================================
# RESPONSES
# =============================================================================


class SubmitShowResponse(CamelModel):
    pending_id: str
    status: str = "PENDING"


class ReviewResultResponse(CamelModel):
    """Admin clients branch on ``success`` and surface ``error`` verbatim."""

    success: bool
    show_id: str | None = None
    message: str | None = None
    email_queued: bool | None = None
    error: str | None = None
    error_code: str | None = None
