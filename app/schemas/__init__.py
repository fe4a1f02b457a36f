"""Public schema exports."""

from .findings import (
    ChatReply,
    CriticalClause,
    DocumentSummary,
    FixedClause,
    FlaggedClauses,
    ImprovementSuggestions,
    LegalForesight,
    MissingPoints,
    PredictedOutcome,
    RiskTag,
)
from .review import (
    AnalysisOutcomeView,
    AutoFixResponse,
    BatchStepView,
    DocumentChatRequest,
    DocumentChatResponse,
    DocumentReviewRequest,
    DocumentReviewResponse,
    FlaggedClauseView,
    MissingPointView,
    RunNoticeView,
)

__all__ = [
    "AnalysisOutcomeView",
    "AutoFixResponse",
    "BatchStepView",
    "ChatReply",
    "CriticalClause",
    "DocumentChatRequest",
    "DocumentChatResponse",
    "DocumentReviewRequest",
    "DocumentReviewResponse",
    "DocumentSummary",
    "FixedClause",
    "FlaggedClauseView",
    "FlaggedClauses",
    "ImprovementSuggestions",
    "LegalForesight",
    "MissingPointView",
    "MissingPoints",
    "PredictedOutcome",
    "RiskTag",
    "RunNoticeView",
]
