"""Events published by the review core for a presentation layer to render."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from agents.document_review.models import AnalysisKind, ItemCollection, ItemState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AnalysisCompleted:
    session_id: str
    succeeded: Tuple[AnalysisKind, ...]
    failed: Tuple[Tuple[AnalysisKind, str], ...]
    status: str


@dataclass(frozen=True, slots=True)
class ItemTransitioned:
    session_id: str
    collection: ItemCollection
    item_id: str
    previous: ItemState
    current: ItemState
    fix_loading: bool
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BatchProgress:
    session_id: str
    message: str
    index: int
    total: int


@dataclass(frozen=True, slots=True)
class BatchCompleted:
    session_id: str
    succeeded: int
    failed: int
    message: str


ReviewEvent = Union[AnalysisCompleted, ItemTransitioned, BatchProgress, BatchCompleted]
ReviewListener = Callable[[ReviewEvent], None]


class ReviewEventBus:
    """Deliver events synchronously to every subscribed listener."""

    def __init__(self) -> None:
        self._listeners: List[ReviewListener] = []

    def subscribe(self, listener: ReviewListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: ReviewEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # pragma: no cover - listener bugs stay out of the core
                logger.exception(
                    "Review event listener failed",
                    extra={"event": type(event).__name__},
                )


__all__ = [
    "AnalysisCompleted",
    "BatchCompleted",
    "BatchProgress",
    "ItemTransitioned",
    "ReviewEvent",
    "ReviewEventBus",
    "ReviewListener",
]
