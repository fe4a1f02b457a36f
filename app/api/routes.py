"""
FastAPI routes for the document review agent.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from http import HTTPStatus
from typing import Annotated, Any, Iterator, Union

from fastapi import APIRouter, Depends, HTTPException

from app.core.config import AppSettings
from app.dependencies import SettingsDependency, get_review_service
from app.schemas import (
    AutoFixResponse,
    DocumentChatRequest,
    DocumentChatResponse,
    DocumentReviewRequest,
    DocumentReviewResponse,
    FlaggedClauseView,
    MissingPointView,
)
from app.services import batch_step_view, build_review_response, item_view
from agents.document_review.errors import (
    InputContractError,
    InvalidTransitionError,
    ItemNotFoundError,
    ProviderError,
)
from agents.document_review.models import ItemCollection

router = APIRouter()
logger = logging.getLogger(__name__)

ItemView = Union[FlaggedClauseView, MissingPointView]


@contextmanager
def _review_errors() -> Iterator[None]:
    """Translate review core errors into HTTP responses."""
    try:
        yield
    except InputContractError as exc:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc)) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=str(exc)) from exc
    except ProviderError as exc:
        logger.warning("Reasoning provider failed: %s", exc.reason)
        raise HTTPException(
            status_code=HTTPStatus.BAD_GATEWAY, detail=exc.reason
        ) from exc


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(settings: AppSettings = SettingsDependency) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.post(
    "/reviews",
    response_model=DocumentReviewResponse,
    status_code=HTTPStatus.CREATED,
)
async def start_review(
    payload: DocumentReviewRequest,
    service: Annotated[Any, Depends(get_review_service)],
) -> DocumentReviewResponse:
    """Run every analysis on the submitted document and open a review session."""
    with _review_errors():
        session, notice = await service.start_review(payload)
    return build_review_response(session, notice)


@router.get("/reviews/{session_id}", response_model=DocumentReviewResponse)
async def get_review(
    session_id: str,
    service: Annotated[Any, Depends(get_review_service)],
) -> DocumentReviewResponse:
    session = service.get_session(session_id)
    return build_review_response(session)


@router.post(
    "/reviews/{session_id}/items/{collection}/{item_id}/propose",
    response_model=ItemView,
)
async def propose_fix(
    session_id: str,
    collection: ItemCollection,
    item_id: str,
    service: Annotated[Any, Depends(get_review_service)],
) -> ItemView:
    """Ask the provider for a fix and move the item to ``proposed``."""
    with _review_errors():
        item = await service.propose_fix(session_id, collection, item_id)
    return item_view(item)


@router.post(
    "/reviews/{session_id}/items/{collection}/{item_id}/accept",
    response_model=ItemView,
)
async def accept_fix(
    session_id: str,
    collection: ItemCollection,
    item_id: str,
    service: Annotated[Any, Depends(get_review_service)],
) -> ItemView:
    with _review_errors():
        item = service.accept_fix(session_id, collection, item_id)
    return item_view(item)


@router.post(
    "/reviews/{session_id}/items/{collection}/{item_id}/revert",
    response_model=ItemView,
)
async def revert_fix(
    session_id: str,
    collection: ItemCollection,
    item_id: str,
    service: Annotated[Any, Depends(get_review_service)],
) -> ItemView:
    """Restore the item's original content and return it to ``initial``."""
    with _review_errors():
        item = service.revert_fix(session_id, collection, item_id)
    return item_view(item)


@router.post("/reviews/{session_id}/auto-fix", response_model=AutoFixResponse)
async def auto_fix(
    session_id: str,
    service: Annotated[Any, Depends(get_review_service)],
) -> AutoFixResponse:
    """Fix every eligible item one at a time and report the tally."""
    with _review_errors():
        summary, steps = await service.auto_fix(session_id)
    return AutoFixResponse(
        succeeded=summary.succeeded,
        failed=summary.failed,
        message=summary.message,
        steps=[batch_step_view(step) for step in steps],
    )


@router.post("/reviews/{session_id}/chat", response_model=DocumentChatResponse)
async def chat_with_document(
    session_id: str,
    payload: DocumentChatRequest,
    service: Annotated[Any, Depends(get_review_service)],
) -> DocumentChatResponse:
    with _review_errors():
        reply = await service.ask(session_id, payload.question)
    return DocumentChatResponse(answer=reply.answer)


__all__ = ["router"]
