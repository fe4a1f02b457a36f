"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from app.clients import GeminiClient
from app.core.config import get_settings
from app.services import DocumentReviewService, ReviewSessionStore
from agents.document_review.batch import BatchFixSequencer
from agents.document_review.events import ReviewEventBus
from agents.document_review.lifecycle import FixLifecycleManager
from agents.document_review.orchestrator import AnalysisOrchestrator
from agents.document_review.tools import ReviewTools


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_gemini_client() -> GeminiClient:
    """Provide Gemini client instance."""
    settings = _settings()
    return GeminiClient(settings.gemini)


@lru_cache()
def get_review_tools() -> ReviewTools:
    """Provide the Gemini-backed analysis, fix, and chat provider."""
    return ReviewTools(get_gemini_client())


@lru_cache()
def get_event_bus() -> ReviewEventBus:
    """Provide the process-wide review event bus."""
    return ReviewEventBus()


@lru_cache()
def get_review_store() -> ReviewSessionStore:
    """Provide a process-local review session store."""
    settings = _settings()
    return ReviewSessionStore(ttl_seconds=settings.review.session_ttl_seconds)


@lru_cache()
def get_review_service() -> DocumentReviewService:
    """Build the document review service around the shared provider and store."""
    settings = _settings()
    tools = get_review_tools()
    events = get_event_bus()
    lifecycle = FixLifecycleManager(tools, events=events)
    return DocumentReviewService(
        orchestrator=AnalysisOrchestrator(tools),
        lifecycle=lifecycle,
        sequencer=BatchFixSequencer(lifecycle, events=events),
        chat_provider=tools,
        store=get_review_store(),
        settings=settings.review,
        events=events,
    )


__all__ = [
    "get_event_bus",
    "get_gemini_client",
    "get_review_service",
    "get_review_store",
    "get_review_tools",
]
