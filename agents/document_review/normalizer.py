"""Turn raw clause and missing-point findings into addressable review items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional
from uuid import uuid4

from app.schemas.findings import FlaggedClauses, MissingPoints
from agents.document_review.models import (
    AnalysisKind,
    AnalysisRun,
    FlaggedClauseItem,
    MissingPointItem,
    MissingPointKind,
)

IdFactory = Callable[[str], str]


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex}"


def _present(text: Optional[str]) -> bool:
    return bool(text and text.strip())


@dataclass(slots=True)
class NormalizedFindings:
    flagged_clauses: List[FlaggedClauseItem] = field(default_factory=list)
    missing_points: List[MissingPointItem] = field(default_factory=list)


def normalize_findings(
    clauses: Optional[FlaggedClauses],
    missing: Optional[MissingPoints],
    *,
    id_factory: IdFactory = _new_id,
) -> NormalizedFindings:
    """Build the two item collections from whichever payloads succeeded.

    Missing points come first, then recommendations, then the summary entry.
    Blank entries are dropped; a clause needs both text and a reason.
    """
    normalized = NormalizedFindings()

    if clauses is not None:
        for clause in clauses.critical_clauses:
            if not (_present(clause.clause_text) and _present(clause.reason)):
                continue
            normalized.flagged_clauses.append(
                FlaggedClauseItem(
                    id=id_factory("clause"),
                    original_text=clause.clause_text,
                    original_reason=clause.reason,
                    risk_tags=frozenset(clause.risk_tags),
                )
            )

    if missing is not None:
        for point in filter(_present, missing.missing_points):
            normalized.missing_points.append(
                MissingPointItem(
                    id=id_factory("missing"),
                    kind=MissingPointKind.MISSING,
                    text=point,
                )
            )
        for recommendation in filter(_present, missing.recommendations):
            normalized.missing_points.append(
                MissingPointItem(
                    id=id_factory("recommendation"),
                    kind=MissingPointKind.RECOMMENDATION,
                    text=recommendation,
                )
            )
        if _present(missing.summary):
            normalized.missing_points.append(
                MissingPointItem(
                    id=id_factory("summary"),
                    kind=MissingPointKind.SUMMARY,
                    text=missing.summary,
                )
            )

    return normalized


def normalize_run(run: AnalysisRun, *, id_factory: IdFactory = _new_id) -> NormalizedFindings:
    return normalize_findings(
        run.payload(AnalysisKind.CLAUSES),
        run.payload(AnalysisKind.MISSING_POINTS),
        id_factory=id_factory,
    )


__all__ = ["NormalizedFindings", "normalize_findings", "normalize_run"]
