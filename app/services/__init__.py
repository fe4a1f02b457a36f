"""Service layer exports."""

from .document_review import (
    DocumentReviewService,
    batch_step_view,
    build_review_response,
    item_view,
)
from .review_sessions import ReviewSessionStore

__all__ = [
    "DocumentReviewService",
    "ReviewSessionStore",
    "batch_step_view",
    "build_review_response",
    "item_view",
]
