"""
Business logic tying the review core to the HTTP surface.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, List, Optional, Tuple

from fastapi import HTTPException, status
from pydantic import BaseModel

from app.core.config import ReviewSettings
from app.schemas import (
    AnalysisOutcomeView,
    BatchStepView,
    DocumentReviewRequest,
    DocumentReviewResponse,
    FlaggedClauseView,
    MissingPointView,
    RunNoticeView,
)
from app.schemas.findings import ChatReply
from app.services.review_sessions import ReviewSessionStore
from agents.document_review.batch import BatchFixSequencer, BatchStep, BatchSummary
from agents.document_review.context import resolve_document_context
from agents.document_review.events import AnalysisCompleted, ReviewEventBus
from agents.document_review.lifecycle import FixLifecycleManager
from agents.document_review.models import (
    AnalysisRequest,
    FlaggedClauseItem,
    ItemCollection,
    MissingPointItem,
    ReviewItem,
    Success,
)
from agents.document_review.orchestrator import AnalysisOrchestrator, RunNotice, summarize_run
from agents.document_review.protocol import ChatProvider
from agents.document_review.session import ReviewSession

logger = logging.getLogger(__name__)


class DocumentReviewService:
    """Start reviews and route fix lifecycle operations to the right session."""

    def __init__(
        self,
        *,
        orchestrator: AnalysisOrchestrator,
        lifecycle: FixLifecycleManager,
        sequencer: BatchFixSequencer,
        chat_provider: ChatProvider,
        store: ReviewSessionStore,
        settings: ReviewSettings,
        events: Optional[ReviewEventBus] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._lifecycle = lifecycle
        self._sequencer = sequencer
        self._chat = chat_provider
        self._store = store
        self._settings = settings
        self._events = events or ReviewEventBus()

    async def start_review(
        self, payload: DocumentReviewRequest
    ) -> Tuple[ReviewSession, RunNotice]:
        """Run all analyses for a new document and open a review session.

        Raises ``InputContractError`` when the payload carries neither text nor
        binary data (or both).
        """
        request = self.build_request(payload)
        run = await self._orchestrator.run(request)
        session = ReviewSession.from_run(request, run, filename=payload.filename)
        self._store.save(session)

        notice = summarize_run(run)
        logger.info(
            "Review %s: %s",
            notice.status,
            notice.title,
            extra={"session_id": session.session_id},
        )
        self._events.publish(
            AnalysisCompleted(
                session_id=session.session_id,
                succeeded=tuple(
                    kind for kind, outcome in run.outcomes.items() if outcome.ok
                ),
                failed=tuple(run.failures),
                status=notice.status,
            )
        )
        return session, notice

    def build_request(self, payload: DocumentReviewRequest) -> AnalysisRequest:
        context = resolve_document_context(payload.context, payload.filename)
        binary: Optional[bytes] = None
        mime_type = payload.mime_type

        if payload.document_b64:
            try:
                binary = base64.b64decode(payload.document_b64, validate=True)
            except (ValueError, binascii.Error) as exc:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Document payload is not valid base64.",
                ) from exc
            mime_type = mime_type or "application/pdf"
            if mime_type not in self._settings.allowed_mime_types:
                raise HTTPException(
                    status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                    detail=f"Unsupported document MIME type {mime_type}.",
                )

        size = len(binary) if binary else len((payload.document_text or "").encode("utf-8"))
        if size > self._settings.max_document_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=(
                    "Document exceeds "
                    f"{self._settings.max_document_bytes // (1024 * 1024)}MB limit."
                ),
            )

        return AnalysisRequest(
            context=context,
            document_text=payload.document_text,
            document_binary=binary,
            mime_type=mime_type if binary else None,
        )

    def get_session(self, session_id: str) -> ReviewSession:
        session = self._store.get(session_id)
        if session is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Review session {session_id} not found or expired.",
            )
        return session

    async def propose_fix(
        self, session_id: str, collection: ItemCollection, item_id: str
    ) -> ReviewItem:
        session = self.get_session(session_id)
        return await self._lifecycle.propose(session, collection, item_id)

    def accept_fix(
        self, session_id: str, collection: ItemCollection, item_id: str
    ) -> ReviewItem:
        session = self.get_session(session_id)
        return self._lifecycle.accept(session, collection, item_id)

    def revert_fix(
        self, session_id: str, collection: ItemCollection, item_id: str
    ) -> ReviewItem:
        session = self.get_session(session_id)
        return self._lifecycle.revert(session, collection, item_id)

    async def auto_fix(self, session_id: str) -> Tuple[BatchSummary, List[BatchStep]]:
        session = self.get_session(session_id)
        steps: List[BatchStep] = []
        summary = await self._sequencer.run(session, on_step=steps.append)
        return summary, steps

    async def ask(self, session_id: str, question: str) -> ChatReply:
        session = self.get_session(session_id)
        return await self._chat.chat(session.request, question)


def build_review_response(
    session: ReviewSession, notice: Optional[RunNotice] = None
) -> DocumentReviewResponse:
    """Render a session snapshot into the response schema."""
    notice = notice or summarize_run(session.run)
    analyses: List[AnalysisOutcomeView] = []
    for kind, outcome in session.run.outcomes.items():
        if isinstance(outcome, Success):
            analyses.append(
                AnalysisOutcomeView(
                    kind=kind.value,
                    status="success",
                    payload=_dump_payload(outcome.value),
                )
            )
        else:
            analyses.append(
                AnalysisOutcomeView(kind=kind.value, status="failure", error=outcome.reason)
            )

    return DocumentReviewResponse(
        session_id=session.session_id,
        context=session.context,
        filename=session.filename,
        notice=RunNoticeView(
            status=notice.status,
            title=notice.title,
            description=notice.description,
            error=notice.error,
        ),
        analyses=analyses,
        flagged_clauses=[flagged_clause_view(item) for item in session.flagged_clauses],
        missing_points=[missing_point_view(item) for item in session.missing_points],
    )


def _dump_payload(value: Any) -> Optional[dict[str, Any]]:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return value
    return None


def flagged_clause_view(item: FlaggedClauseItem) -> FlaggedClauseView:
    return FlaggedClauseView(
        id=item.id,
        original_text=item.original_text,
        original_reason=item.original_reason,
        current_text=item.current_text,
        current_reason=item.current_reason,
        risk_tags=sorted(item.risk_tags, key=lambda tag: tag.value),
        state=item.state.value,
        fix_loading=item.fix_loading,
        last_error=item.last_error,
    )


def missing_point_view(item: MissingPointItem) -> MissingPointView:
    return MissingPointView(
        id=item.id,
        kind=item.kind.value,
        text=item.text,
        is_fixable=item.is_fixable,
        current_text=item.current_text,
        justification=item.justification,
        state=item.state.value,
        fix_loading=item.fix_loading,
        last_error=item.last_error,
    )


def item_view(item: ReviewItem) -> FlaggedClauseView | MissingPointView:
    if isinstance(item, FlaggedClauseItem):
        return flagged_clause_view(item)
    return missing_point_view(item)


def batch_step_view(step: BatchStep) -> BatchStepView:
    return BatchStepView(
        item_id=step.item.id,
        collection=step.item.collection.value,
        index=step.index,
        total=step.total,
        progress=step.progress,
        succeeded=step.succeeded,
        error=step.error,
    )


__all__ = [
    "DocumentReviewService",
    "batch_step_view",
    "build_review_response",
    "item_view",
]
