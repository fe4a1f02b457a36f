"""
Pydantic models for the document review HTTP surface.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.findings import RiskTag

ItemStateName = Literal["initial", "proposed", "accepted"]


class DocumentReviewRequest(BaseModel):
    """Incoming document plus optional context for a new review."""

    document_text: Optional[str] = Field(
        None, description="Plain-text contents of the document."
    )
    document_b64: Optional[str] = Field(
        None,
        description="Base64 encoded PDF or image when the document is not plain text.",
    )
    mime_type: Optional[str] = Field(
        None, description="MIME type of the base64 payload (e.g., application/pdf)."
    )
    filename: Optional[str] = Field(
        None, description="Original file name, used to infer the document context."
    )
    context: Optional[str] = Field(
        None,
        description=(
            "Free-form description of the document, e.g. 'NDA for a startup "
            "partnership'."
        ),
    )


class AnalysisOutcomeView(BaseModel):
    kind: str
    status: Literal["success", "failure"]
    payload: Optional[dict[str, Any]] = None
    error: Optional[str] = None


class RunNoticeView(BaseModel):
    status: Literal["complete", "partial", "failed"]
    title: str
    description: str
    error: Optional[str] = None


class FlaggedClauseView(BaseModel):
    id: str
    original_text: str
    original_reason: str
    current_text: str
    current_reason: str
    risk_tags: List[RiskTag] = Field(default_factory=list)
    state: ItemStateName
    fix_loading: bool = False
    last_error: Optional[str] = None


class MissingPointView(BaseModel):
    id: str
    kind: Literal["missing", "recommendation", "summary"]
    text: str
    is_fixable: bool
    current_text: str
    justification: Optional[str] = None
    state: ItemStateName
    fix_loading: bool = False
    last_error: Optional[str] = None


class DocumentReviewResponse(BaseModel):
    """Snapshot of a review session returned to the presentation layer."""

    session_id: str
    context: str
    filename: Optional[str] = None
    notice: RunNoticeView
    analyses: List[AnalysisOutcomeView] = Field(default_factory=list)
    flagged_clauses: List[FlaggedClauseView] = Field(default_factory=list)
    missing_points: List[MissingPointView] = Field(default_factory=list)


class BatchStepView(BaseModel):
    item_id: str
    collection: Literal["flagged_clause", "missing_point"]
    index: int
    total: int
    progress: str
    succeeded: bool
    error: Optional[str] = None


class AutoFixResponse(BaseModel):
    succeeded: int
    failed: int
    message: str
    steps: List[BatchStepView] = Field(default_factory=list)


class DocumentChatRequest(BaseModel):
    question: str = Field(..., description="Question about the reviewed document.")


class DocumentChatResponse(BaseModel):
    answer: str


__all__ = [
    "AnalysisOutcomeView",
    "AutoFixResponse",
    "BatchStepView",
    "DocumentChatRequest",
    "DocumentChatResponse",
    "DocumentReviewRequest",
    "DocumentReviewResponse",
    "FlaggedClauseView",
    "MissingPointView",
    "RunNoticeView",
]
