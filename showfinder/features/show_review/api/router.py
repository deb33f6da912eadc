"""
Submission review routes.

Usage:
    1. POST /submissions - public form / scraper intake (no auth)
    2. GET  /admin/submissions - pending list with quality scores
    3. PUT  /admin/submissions/{id} - edit normalized payload
    4. POST /admin/submissions/{id}/approve - publish as a show
    5. POST /admin/submissions/{id}/reject - reject with a reason
    6. POST /admin/submissions/batch - approve or reject many
    7. GET  /admin/mailing-list - organizer contacts
    8. GET/PATCH /admin/sources - scraping source registry
    9. GET  /admin/coordinate-issues, POST /admin/shows/{id}/coordinates

Review transitions always answer 200 with a result body; clients branch
on ``success``.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from showfinder.auth.verify import admin_dependency
from showfinder.db.helpers import DatabaseError
from showfinder.features.show_review.domain import ReviewAction, ReviewResult, SubmissionStatus
from showfinder.features.show_review.errors import NotFoundError, ValidationError
from showfinder.features.show_review.services import (
    coordinate_service,
    intake_service,
    show_review_service,
    source_service,
)
from showfinder.infrastructure.observability.logging import get_logger

from .schemas import (
    ApproveRequest,
    BatchReviewRequest,
    EditPendingShowRequest,
    FixCoordinatesRequest,
    RejectRequest,
    ReviewResultResponse,
    SubmitShowRequest,
    SubmitShowResponse,
    UpdateSourceRequest,
)

router = APIRouter(tags=["submissions"])
admin_router = APIRouter(prefix="/admin", tags=["admin-review"])
logger = get_logger(__name__)


def _to_response(result: ReviewResult) -> ReviewResultResponse:
    return ReviewResultResponse(
        success=result.success,
        show_id=result.show_id,
        message=result.message,
        email_queued=result.email_queued if result.success else None,
        error=result.error,
        error_code=result.error_code,
    )


def _database_unavailable(operation: str, error: DatabaseError) -> HTTPException:
    logger.error("Review API database failure", operation=operation, error=str(error))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database temporarily unavailable"
    )


# =============================================================================
# PUBLIC INTAKE
# =============================================================================


@router.post("/submissions", response_model=SubmitShowResponse, status_code=status.HTTP_201_CREATED)
async def submit_show(request: SubmitShowRequest):
    """
    Queue a show for admin review.

    Raises:
        422: Payload is not an object or mixes schedule timezones
        503: Database unavailable
    """
    try:
        pending_id = await intake_service.submit_pending_show(
            raw_payload=request.raw_payload,
            source_url=request.source_url,
            organizer_name=request.organizer_name,
            organizer_email=request.organizer_email,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message) from e
    except DatabaseError as e:
        raise _database_unavailable("submit_show", e) from e

    return SubmitShowResponse(pending_id=pending_id)


# =============================================================================
# ADMIN REVIEW
# =============================================================================


@admin_router.get("/submissions")
async def list_submissions(
    status_filter: SubmissionStatus = Query(SubmissionStatus.PENDING, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    source: str | None = Query(None),
    min_score: int = Query(0, ge=0, le=100, alias="minScore"),
    max_score: int = Query(100, ge=0, le=100, alias="maxScore"),
    claims: dict = Depends(admin_dependency),
):
    try:
        return await show_review_service.list_submissions(
            status=status_filter,
            limit=limit,
            offset=offset,
            source_url=source,
            min_score=min_score,
            max_score=max_score,
        )
    except DatabaseError as e:
        raise _database_unavailable("list_submissions", e) from e


@admin_router.post("/submissions/batch")
async def batch_review(request: BatchReviewRequest, claims: dict = Depends(admin_dependency)):
    return await show_review_service.batch_review(
        action=ReviewAction(request.action),
        pending_ids=request.pending_ids,
        notes=request.notes,
        admin_id=claims.get("sub"),
    )


@admin_router.put(
    "/submissions/{pending_id}",
    response_model=ReviewResultResponse,
    response_model_exclude_none=True,
)
async def edit_submission(
    pending_id: str, request: EditPendingShowRequest, claims: dict = Depends(admin_dependency)
):
    result = await show_review_service.edit(
        pending_id,
        request.normalized_payload,
        admin_notes=request.admin_notes,
        admin_id=claims.get("sub"),
    )
    return _to_response(result)


@admin_router.post(
    "/submissions/{pending_id}/approve",
    response_model=ReviewResultResponse,
    response_model_exclude_none=True,
)
async def approve_submission(
    pending_id: str,
    request: ApproveRequest | None = None,
    claims: dict = Depends(admin_dependency),
):
    result = await show_review_service.approve(
        pending_id,
        admin_id=claims.get("sub"),
        admin_notes=request.admin_notes if request else None,
    )
    return _to_response(result)


@admin_router.post(
    "/submissions/{pending_id}/reject",
    response_model=ReviewResultResponse,
    response_model_exclude_none=True,
)
async def reject_submission(
    pending_id: str, request: RejectRequest, claims: dict = Depends(admin_dependency)
):
    result = await show_review_service.reject(pending_id, request.reason, admin_id=claims.get("sub"))
    return _to_response(result)


# =============================================================================
# MAILING LIST
# =============================================================================


@admin_router.get("/mailing-list")
async def get_mailing_list(
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    claims: dict = Depends(admin_dependency),
):
    try:
        return await intake_service.get_mailing_list(status=status_filter, limit=limit, offset=offset)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except DatabaseError as e:
        raise _database_unavailable("get_mailing_list", e) from e


# =============================================================================
# SCRAPING SOURCES
# =============================================================================


@admin_router.get("/sources")
async def list_sources(
    enabled: bool | None = Query(None),
    claims: dict = Depends(admin_dependency),
):
    try:
        sources = await source_service.list_sources(enabled)
    except DatabaseError as e:
        raise _database_unavailable("list_sources", e) from e
    return {"data": [source.to_dict() for source in sources]}


@admin_router.patch("/sources")
async def update_source(request: UpdateSourceRequest, claims: dict = Depends(admin_dependency)):
    try:
        source = await source_service.update_source(
            request.url,
            priority_score=request.priority_score,
            enabled=request.enabled,
            notes=request.notes,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except DatabaseError as e:
        raise _database_unavailable("update_source", e) from e

    logger.info("Scraping source updated by admin", source_url=request.url, admin_id=claims.get("sub"))
    return source.to_dict()


# =============================================================================
# COORDINATE ISSUES
# =============================================================================


@admin_router.get("/coordinate-issues")
async def list_coordinate_issues(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    claims: dict = Depends(admin_dependency),
):
    try:
        return await coordinate_service.list_issues(page=page, page_size=page_size)
    except DatabaseError as e:
        raise _database_unavailable("list_coordinate_issues", e) from e


@admin_router.post(
    "/shows/{show_id}/coordinates",
    response_model=ReviewResultResponse,
    response_model_exclude_none=True,
)
async def fix_coordinates(
    show_id: str, request: FixCoordinatesRequest, claims: dict = Depends(admin_dependency)
):
    result = await coordinate_service.fix_show_coordinates(
        show_id, request.latitude, request.longitude, admin_id=claims.get("sub")
    )
    return _to_response(result)
