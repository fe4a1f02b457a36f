"""
Pydantic models describing the payloads returned by the reasoning provider.

Field aliases follow the camelCase keys the Gemini prompts ask for, while the
Python attribute names stay snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskTag(str, Enum):
    """Risk categories attached to flagged clauses."""

    CONTROL = "Control Risk"
    FINANCIAL = "Financial Risk"
    EXIT = "Exit Risk"
    COMPLIANCE = "Compliance Risk"
    OPERATIONAL = "Operational Risk"
    REPUTATIONAL = "Reputational Risk"
    LEGAL_AMBIGUITY = "Legal Ambiguity"
    OTHER = "Other"


class _ProviderPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DocumentSummary(_ProviderPayload):
    """Plain-language overview of the document."""

    overall_summary: str = Field(..., alias="overallSummary")
    involved_parties: List[str] = Field(default_factory=list, alias="involvedParties")
    key_obligations: List[str] = Field(default_factory=list, alias="keyObligations")
    financial_terms: List[str] = Field(default_factory=list, alias="financialTerms")
    key_dates: List[str] = Field(default_factory=list, alias="keyDates")


class CriticalClause(_ProviderPayload):
    """A clause the provider considers risky, with the reason and risk tags."""

    clause_text: str = Field(..., alias="clauseText", min_length=1)
    reason: str = Field(..., min_length=1)
    risk_tags: List[RiskTag] = Field(default_factory=list, alias="riskTags")

    @field_validator("risk_tags", mode="before")
    @classmethod
    def _coerce_unknown_tags(cls, value: Any) -> Any:
        """Map tags outside the known vocabulary onto ``Other``."""
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        known = {tag.value for tag in RiskTag}
        return [tag if tag in known else RiskTag.OTHER.value for tag in value]


class FlaggedClauses(_ProviderPayload):
    critical_clauses: List[CriticalClause] = Field(
        default_factory=list, alias="criticalClauses"
    )


class ImprovementSuggestions(_ProviderPayload):
    suggestions: List[str] = Field(default_factory=list)


class MissingPoints(_ProviderPayload):
    """Information absent from the document plus recommendations to add it."""

    missing_points: List[str] = Field(default_factory=list, alias="missingPoints")
    recommendations: List[str] = Field(default_factory=list)
    summary: str = ""


class PredictedOutcome(_ProviderPayload):
    identified_issue: str = Field(..., alias="identifiedIssue")
    potential_real_world_outcome: str = Field(..., alias="potentialRealWorldOutcome")
    risk_category: Optional[str] = Field(None, alias="riskCategory")


class LegalForesight(_ProviderPayload):
    """Predicted real-world consequences of the document as written."""

    overall_risk_assessment: str = Field("", alias="overallRiskAssessment")
    predicted_outcomes: List[PredictedOutcome] = Field(
        default_factory=list, alias="predictedOutcomes"
    )
    strategic_recommendations: List[str] = Field(
        default_factory=list, alias="strategicRecommendations"
    )


class FixedClause(_ProviderPayload):
    """Replacement or newly generated clause text."""

    fixed_text: str = Field(..., alias="fixedClauseText")
    justification: Optional[str] = Field(None, alias="justificationNote")

    @field_validator("fixed_text")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("AI failed to generate a fixed clause.")
        return value


class ChatReply(_ProviderPayload):
    answer: str = Field(..., alias="aiResponse")


__all__ = [
    "ChatReply",
    "CriticalClause",
    "DocumentSummary",
    "FixedClause",
    "FlaggedClauses",
    "ImprovementSuggestions",
    "LegalForesight",
    "MissingPoints",
    "PredictedOutcome",
    "RiskTag",
]
