"""Gemini-backed implementations of the analysis, fix, and chat providers."""

from __future__ import annotations

import logging
from textwrap import dedent
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from app.clients.gemini import GeminiClient, GeminiModelError, PromptPart
from app.schemas.findings import (
    ChatReply,
    DocumentSummary,
    FixedClause,
    FlaggedClauses,
    ImprovementSuggestions,
    LegalForesight,
    MissingPoints,
    RiskTag,
)
from agents.document_review.errors import InputContractError, ProviderError
from agents.document_review.models import (
    AnalysisKind,
    AnalysisRequest,
    FixMode,
    FixRequest,
)

logger = logging.getLogger(__name__)

_PAYLOAD_MODELS: Dict[AnalysisKind, Type[BaseModel]] = {
    AnalysisKind.SUMMARY: DocumentSummary,
    AnalysisKind.CLAUSES: FlaggedClauses,
    AnalysisKind.SUGGESTIONS: ImprovementSuggestions,
    AnalysisKind.MISSING_POINTS: MissingPoints,
    AnalysisKind.OUTCOMES: LegalForesight,
}

_RISK_TAGS = ", ".join(f'"{tag.value}"' for tag in RiskTag)

_INSTRUCTIONS: Dict[AnalysisKind, str] = {
    AnalysisKind.SUMMARY: (
        "You are an AI legal assistant. Summarize the document in plain language. "
        "Return JSON with keys overallSummary (string, at most 3 paragraphs), "
        "involvedParties, keyObligations, financialTerms, keyDates (arrays of "
        'strings; use ["Not specified"] when nothing applies).'
    ),
    AnalysisKind.CLAUSES: (
        "You are an AI legal assistant specializing in risk identification. "
        "Identify the critical clauses of the document. Return JSON with key "
        "criticalClauses: an array of objects with clauseText (exact clause "
        "text), reason (why it is critical and its potential impact) and "
        f"riskTags (any of {_RISK_TAGS}). Return an empty array when no clause "
        "is critical."
    ),
    AnalysisKind.SUGGESTIONS: (
        "You are an AI legal assistant. Suggest concrete improvements to the "
        "document's wording and structure. Return JSON with key suggestions "
        "(array of strings)."
    ),
    AnalysisKind.MISSING_POINTS: (
        "You are an AI legal assistant. Identify information or clauses that a "
        "document of this type should contain but does not. Return JSON with keys "
        "missingPoints (array of strings), recommendations (array of strings) and "
        "summary (string explaining why the missing points matter)."
    ),
    AnalysisKind.OUTCOMES: (
        "You are an AI legal foresight analyst. Predict the real-world outcomes "
        "the document could lead to for the reviewing party. Return JSON with keys "
        "overallRiskAssessment (string starting with HIGH, MEDIUM or LOW followed "
        "by a colon and a short explanation), predictedOutcomes (array of objects "
        "with identifiedIssue, potentialRealWorldOutcome, riskCategory) and "
        "strategicRecommendations (array of strings)."
    ),
}

_FIX_INSTRUCTIONS = dedent(
    """
    You are a professional contract lawyer AI. Either rewrite a problematic
    clause or generate a new clause for a legal document. The result must be
    legally sound, fair, easy to understand and minimize ambiguity or legal risk.
    Return JSON with keys fixedClauseText (the complete, contract-ready clause)
    and justificationNote (a brief explanation of the improvement).
    """
).strip()


class ReviewTools:
    """Facade over Gemini used as the review core's reasoning provider."""

    def __init__(self, gemini_client: GeminiClient) -> None:
        self._gemini = gemini_client

    async def analyze(self, kind: AnalysisKind, request: AnalysisRequest) -> BaseModel:
        """Run one analysis kind against the document."""
        parts: List[PromptPart] = [
            _INSTRUCTIONS[kind],
            f"Context: {request.context}",
        ]
        if kind is AnalysisKind.MISSING_POINTS:
            parts.append(f"Document type: {request.context}")
        parts.extend(_document_parts(request))

        raw = await self._call(parts, has_media=request.is_binary, kind=kind.value)
        return _validate(_PAYLOAD_MODELS[kind], raw, kind=kind.value)

    async def fix(
        self,
        *,
        problem: str,
        context: str,
        original_text: Optional[str],
        mode: FixMode,
    ) -> FixedClause:
        """Rewrite a flagged clause or generate a clause for a missing point."""
        fix_request = FixRequest(
            problem=problem,
            context=context,
            mode=FixMode(mode),
            original_text=original_text,
        )
        parts: List[PromptPart] = [
            _FIX_INSTRUCTIONS,
            f"Document Context: {fix_request.context or 'General Legal Document'}",
        ]
        if fix_request.mode is FixMode.REWRITE:
            parts.append(
                "Instruction: Rewrite the following problematic clause.\n"
                f"Original Problematic Clause:\n```\n{fix_request.original_text}\n```\n"
                f"Reason it's Problematic / What to Fix: {fix_request.problem}"
            )
        else:
            parts.append(
                "Instruction: Generate a new clause to address the following "
                f"missing element or problem.\n{fix_request.problem}"
            )
            if fix_request.original_text:
                parts.append(
                    "For context, a related clause was also provided: "
                    f'"{fix_request.original_text}"'
                )

        raw = await self._call(parts, has_media=False, kind="fix")
        return _validate(FixedClause, raw, kind="fix")

    async def chat(self, request: AnalysisRequest, question: str) -> ChatReply:
        """Answer a free-form question about the reviewed document."""
        if not question or not question.strip():
            raise InputContractError("A user question must be provided.")
        parts: List[PromptPart] = [
            (
                "You are an AI legal assistant answering questions about the "
                "document below. Answer only from the document; say so when it "
                "does not contain the answer. Return JSON with key aiResponse."
            ),
            f"Context: {request.context}",
            *_document_parts(request),
            f"Question: {question.strip()}",
        ]
        raw = await self._call(parts, has_media=request.is_binary, kind="chat")
        return _validate(ChatReply, raw, kind="chat")

    async def _call(self, parts: List[PromptPart], *, has_media: bool, kind: str) -> Any:
        try:
            return await self._gemini.generate_json(parts, has_media=has_media)
        except GeminiModelError as exc:
            raise ProviderError(str(exc), kind=kind) from exc


def _document_parts(request: AnalysisRequest) -> List[PromptPart]:
    if request.document_binary is not None:
        return [
            "Document:",
            {"mime_type": request.mime_type, "data": request.document_binary},
        ]
    return [f"Document Text:\n{request.document_text}"]


def _validate(model: Type[BaseModel], raw: Any, *, kind: str) -> Any:
    if not isinstance(raw, dict) or ("raw" in raw and len(raw) == 1):
        logger.warning("Gemini returned a non-JSON payload", extra={"kind": kind})
        raise ProviderError("Malformed response from the reasoning provider.", kind=kind)
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        logger.warning(
            "Gemini payload failed validation: %s", exc.errors(), extra={"kind": kind}
        )
        raise ProviderError(
            f"Malformed response from the reasoning provider: {exc.error_count()} "
            "invalid field(s).",
            kind=kind,
        ) from exc


__all__ = ["ReviewTools"]
