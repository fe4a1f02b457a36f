"""
Data models shared across the document review core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from app.schemas.findings import FixedClause, RiskTag
from agents.document_review.errors import InputContractError


class AnalysisKind(str, Enum):
    """The five independent analyses run for every document."""

    SUMMARY = "summary"
    CLAUSES = "clauses"
    SUGGESTIONS = "suggestions"
    MISSING_POINTS = "missing_points"
    OUTCOMES = "outcomes"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS: Dict[AnalysisKind, str] = {
    AnalysisKind.SUMMARY: "Summarization",
    AnalysisKind.CLAUSES: "Clause flagging",
    AnalysisKind.SUGGESTIONS: "Improvement suggestion",
    AnalysisKind.MISSING_POINTS: "Missing points analysis",
    AnalysisKind.OUTCOMES: "Legal foresight analysis",
}

ANALYSIS_KINDS: Tuple[AnalysisKind, ...] = tuple(AnalysisKind)


class ItemState(str, Enum):
    INITIAL = "initial"
    PROPOSED = "proposed"
    ACCEPTED = "accepted"


class FixMode(str, Enum):
    REWRITE = "rewrite"
    GENERATE = "generate"


class ItemCollection(str, Enum):
    FLAGGED_CLAUSE = "flagged_clause"
    MISSING_POINT = "missing_point"


class MissingPointKind(str, Enum):
    MISSING = "missing"
    RECOMMENDATION = "recommendation"
    SUMMARY = "summary"


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """Immutable document payload handed to every analysis.

    Exactly one of ``document_text`` or ``document_binary`` must be supplied.
    """

    context: str
    document_text: Optional[str] = None
    document_binary: Optional[bytes] = None
    mime_type: Optional[str] = None

    def __post_init__(self) -> None:
        has_text = bool(self.document_text and self.document_text.strip())
        has_binary = bool(self.document_binary)
        if has_text == has_binary:
            raise InputContractError(
                "Exactly one of document text or document binary must be provided."
            )
        if not self.context or not self.context.strip():
            raise InputContractError("Document context must not be empty.")
        if has_binary and not self.mime_type:
            object.__setattr__(self, "mime_type", "application/pdf")

    @property
    def is_binary(self) -> bool:
        return self.document_binary is not None


@dataclass(frozen=True, slots=True)
class FixRequest:
    """Arguments for a single fix call, validated on construction."""

    problem: str
    context: str
    mode: FixMode
    original_text: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.problem or not self.problem.strip():
            raise InputContractError("Problem description must be provided.")
        if self.mode is FixMode.REWRITE and not self.original_text:
            raise InputContractError(
                "Original clause text must be provided when mode is 'rewrite'."
            )


@dataclass(frozen=True, slots=True)
class Success:
    value: Any
    ok: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class Failure:
    reason: str
    ok: ClassVar[bool] = False


AnalysisOutcome = Union[Success, Failure]


@dataclass(slots=True)
class AnalysisRun:
    """Outcomes of one user-initiated analysis request, one per kind."""

    outcomes: Dict[AnalysisKind, AnalysisOutcome]

    @property
    def all_failed(self) -> bool:
        return bool(self.outcomes) and all(
            not outcome.ok for outcome in self.outcomes.values()
        )

    @property
    def any_failed(self) -> bool:
        return any(not outcome.ok for outcome in self.outcomes.values())

    @property
    def failures(self) -> List[Tuple[AnalysisKind, str]]:
        return [
            (kind, outcome.reason)
            for kind, outcome in self.outcomes.items()
            if isinstance(outcome, Failure)
        ]

    def payload(self, kind: AnalysisKind) -> Any:
        """Return the success payload for ``kind`` or ``None`` when it failed."""
        outcome = self.outcomes.get(kind)
        if isinstance(outcome, Success):
            return outcome.value
        return None


@dataclass(slots=True)
class FlaggedClauseItem:
    """A flagged clause that can carry a proposed replacement."""

    id: str
    original_text: str
    original_reason: str
    risk_tags: frozenset[RiskTag] = field(default_factory=frozenset)
    current_text: str = ""
    current_reason: str = ""
    state: ItemState = ItemState.INITIAL
    fix_loading: bool = False
    last_error: Optional[str] = None

    collection: ClassVar[ItemCollection] = ItemCollection.FLAGGED_CLAUSE
    label: ClassVar[str] = "flagged clause"

    def __post_init__(self) -> None:
        if not self.current_text:
            self.current_text = self.original_text
        if not self.current_reason:
            self.current_reason = self.original_reason

    @property
    def is_fixable(self) -> bool:
        return True

    def fix_request(self, context: str) -> FixRequest:
        return FixRequest(
            problem=self.original_reason,
            context=context,
            mode=FixMode.REWRITE,
            original_text=self.original_text,
        )

    def apply_fix(self, fix: FixedClause) -> None:
        self.current_text = fix.fixed_text
        self.current_reason = fix.justification or self.original_reason

    def restore(self) -> None:
        self.current_text = self.original_text
        self.current_reason = self.original_reason


@dataclass(slots=True)
class MissingPointItem:
    """A missing-point finding; only ``missing`` entries enter the fix lifecycle."""

    id: str
    kind: MissingPointKind
    text: str
    current_text: str = ""
    justification: Optional[str] = None
    state: ItemState = ItemState.INITIAL
    fix_loading: bool = False
    last_error: Optional[str] = None

    collection: ClassVar[ItemCollection] = ItemCollection.MISSING_POINT
    label: ClassVar[str] = "missing point"

    def __post_init__(self) -> None:
        if not self.current_text:
            self.current_text = self.text

    @property
    def is_fixable(self) -> bool:
        return self.kind is MissingPointKind.MISSING

    def fix_request(self, context: str) -> FixRequest:
        return FixRequest(problem=self.text, context=context, mode=FixMode.GENERATE)

    def apply_fix(self, fix: FixedClause) -> None:
        self.current_text = fix.fixed_text
        self.justification = fix.justification

    def restore(self) -> None:
        self.current_text = self.text
        self.justification = None


ReviewItem = Union[FlaggedClauseItem, MissingPointItem]


__all__ = [
    "ANALYSIS_KINDS",
    "AnalysisKind",
    "AnalysisOutcome",
    "AnalysisRequest",
    "AnalysisRun",
    "Failure",
    "FixMode",
    "FixRequest",
    "FlaggedClauseItem",
    "ItemCollection",
    "ItemState",
    "MissingPointItem",
    "MissingPointKind",
    "ReviewItem",
    "RiskTag",
    "Success",
]
