"""Interfaces the review core expects from its reasoning provider."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from app.schemas.findings import ChatReply, FixedClause
from agents.document_review.models import AnalysisKind, AnalysisRequest, FixMode


class AnalysisProvider(Protocol):
    async def analyze(self, kind: AnalysisKind, request: AnalysisRequest) -> Any:
        """Return the findings payload for ``kind`` or raise ``ProviderError``."""
        ...


class FixProvider(Protocol):
    async def fix(
        self,
        *,
        problem: str,
        context: str,
        original_text: Optional[str],
        mode: FixMode,
    ) -> FixedClause:
        """Return replacement text for one problem or raise ``ProviderError``."""
        ...


class ChatProvider(Protocol):
    async def chat(self, request: AnalysisRequest, question: str) -> ChatReply:
        ...


__all__ = ["AnalysisProvider", "ChatProvider", "FixProvider"]
