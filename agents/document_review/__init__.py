"""Document review core.

Runs the five document analyses concurrently, normalizes the findings into
addressable items, and manages the auto-fix lifecycle of those items.
"""

from __future__ import annotations

from agents.document_review.batch import BatchFixSequencer, BatchStep, BatchSummary
from agents.document_review.context import resolve_document_context
from agents.document_review.errors import (
    InputContractError,
    InvalidTransitionError,
    ItemNotFoundError,
    ProviderError,
    ReviewError,
)
from agents.document_review.events import ReviewEventBus
from agents.document_review.lifecycle import FixLifecycleManager
from agents.document_review.models import (
    AnalysisKind,
    AnalysisRequest,
    AnalysisRun,
    Failure,
    ItemCollection,
    ItemState,
    Success,
)
from agents.document_review.orchestrator import AnalysisOrchestrator, summarize_run
from agents.document_review.session import ReviewSession

__all__ = [
    "AnalysisKind",
    "AnalysisOrchestrator",
    "AnalysisRequest",
    "AnalysisRun",
    "BatchFixSequencer",
    "BatchStep",
    "BatchSummary",
    "Failure",
    "FixLifecycleManager",
    "InputContractError",
    "InvalidTransitionError",
    "ItemCollection",
    "ItemNotFoundError",
    "ItemState",
    "ProviderError",
    "ReviewError",
    "ReviewEventBus",
    "ReviewSession",
    "Success",
    "resolve_document_context",
    "summarize_run",
]
