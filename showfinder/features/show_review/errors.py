"""
Error taxonomy for submission review.

Services raise these internally and convert them to ``ReviewResult``
objects at the API boundary, so admin clients branch on ``success``
instead of catching HTTP errors.
"""


class ShowReviewError(Exception):
    """Base exception for review operations."""

    code = "REVIEW_FAILED"

    def __init__(self, message: str, pending_id: str | None = None, recoverable: bool = False):
        super().__init__(message)
        self.message = message
        self.pending_id = pending_id
        self.recoverable = recoverable


class NotFoundError(ShowReviewError):
    code = "NOT_FOUND"


class InvalidStateError(ShowReviewError):
    code = "ALREADY_PROCESSED"


class ValidationError(ShowReviewError):
    code = "VALIDATION_ERROR"


class TransientIOError(ShowReviewError):
    """Best-effort side effect failed; never aborts the primary transaction."""

    code = "TRANSIENT_IO"

    def __init__(self, message: str, pending_id: str | None = None):
        super().__init__(message, pending_id=pending_id, recoverable=True)
