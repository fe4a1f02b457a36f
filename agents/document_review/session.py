"""Explicit per-run state: the analysis outcomes plus both item collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from agents.document_review.errors import ItemNotFoundError
from agents.document_review.models import (
    AnalysisRequest,
    AnalysisRun,
    FlaggedClauseItem,
    ItemCollection,
    ItemState,
    MissingPointItem,
    ReviewItem,
)
from agents.document_review.normalizer import IdFactory, _new_id, normalize_run


@dataclass(slots=True)
class ReviewSession:
    """Items produced by one analysis run, addressable by collection and id."""

    session_id: str
    request: AnalysisRequest
    run: AnalysisRun
    flagged_clauses: List[FlaggedClauseItem] = field(default_factory=list)
    missing_points: List[MissingPointItem] = field(default_factory=list)
    filename: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _index: Dict[ItemCollection, Dict[str, ReviewItem]] = field(
        default_factory=dict, repr=False
    )

    def __post_init__(self) -> None:
        self._index = {
            ItemCollection.FLAGGED_CLAUSE: {item.id: item for item in self.flagged_clauses},
            ItemCollection.MISSING_POINT: {item.id: item for item in self.missing_points},
        }

    @classmethod
    def from_run(
        cls,
        request: AnalysisRequest,
        run: AnalysisRun,
        *,
        filename: Optional[str] = None,
        session_id: Optional[str] = None,
        id_factory: IdFactory = _new_id,
    ) -> "ReviewSession":
        normalized = normalize_run(run, id_factory=id_factory)
        return cls(
            session_id=session_id or uuid4().hex,
            request=request,
            run=run,
            flagged_clauses=normalized.flagged_clauses,
            missing_points=normalized.missing_points,
            filename=filename,
        )

    @property
    def context(self) -> str:
        return self.request.context

    def get_item(self, collection: ItemCollection, item_id: str) -> ReviewItem:
        try:
            return self._index[ItemCollection(collection)][item_id]
        except (KeyError, ValueError) as exc:
            raise ItemNotFoundError(
                f"No {collection} item with id '{item_id}' in session {self.session_id}."
            ) from exc

    def eligible_items(self) -> List[ReviewItem]:
        """Snapshot of fixable items awaiting a first fix, clauses first."""
        candidates: List[ReviewItem] = [*self.flagged_clauses, *self.missing_points]
        return [
            item
            for item in candidates
            if item.is_fixable
            and item.state is ItemState.INITIAL
            and not item.fix_loading
        ]

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


__all__ = ["ReviewSession"]
