"""
Concurrent fan-out of the five document analyses.

Each analysis is wrapped so that any failure becomes a ``Failure`` outcome for
that kind only; the orchestrator returns once every analysis has settled.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from agents.document_review.errors import InputContractError, ProviderError
from agents.document_review.models import (
    ANALYSIS_KINDS,
    AnalysisKind,
    AnalysisOutcome,
    AnalysisRequest,
    AnalysisRun,
    Failure,
    Success,
)
from agents.document_review.protocol import AnalysisProvider

logger = logging.getLogger(__name__)

STATUS_COMPLETE = "complete"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RunNotice:
    """Caller-facing summary of how an analysis run went."""

    status: str
    title: str
    description: str
    error: Optional[str] = None


class AnalysisOrchestrator:
    """Run every analysis kind concurrently and collect the outcomes."""

    def __init__(
        self,
        provider: AnalysisProvider,
        kinds: Sequence[AnalysisKind] = ANALYSIS_KINDS,
    ) -> None:
        self._provider = provider
        self._kinds = tuple(kinds)

    async def run(self, request: AnalysisRequest) -> AnalysisRun:
        if not isinstance(request, AnalysisRequest):
            raise InputContractError("An AnalysisRequest is required to run analyses.")

        logger.info(
            "Starting document analyses",
            extra={"kinds": [kind.value for kind in self._kinds]},
        )
        outcomes = await asyncio.gather(
            *(self._settle(kind, request) for kind in self._kinds)
        )
        run = AnalysisRun(outcomes=dict(zip(self._kinds, outcomes)))
        logger.info(
            "Document analyses settled: %d succeeded, %d failed",
            len(self._kinds) - len(run.failures),
            len(run.failures),
        )
        return run

    async def _settle(
        self, kind: AnalysisKind, request: AnalysisRequest
    ) -> AnalysisOutcome:
        try:
            payload = await self._provider.analyze(kind, request)
        except ProviderError as exc:
            logger.warning("%s failed: %s", kind.label, exc.reason, extra={"kind": kind.value})
            return Failure(exc.reason or f"{kind.label} failed.")
        except Exception as exc:
            logger.warning(
                "%s failed unexpectedly: %s", kind.label, exc, extra={"kind": kind.value}
            )
            return Failure(str(exc) or f"{kind.label} failed.")
        return Success(payload)


def summarize_run(run: AnalysisRun) -> RunNotice:
    """Translate a run into the notice a presentation layer should surface."""
    if run.all_failed:
        reasons = "\n".join(reason for _, reason in run.failures)
        return RunNotice(
            status=STATUS_FAILED,
            title="Analysis Failed",
            description="All AI analyses failed. Please check the error details.",
            error=f"All AI analyses failed. Errors:\n{reasons}",
        )
    if run.any_failed:
        return RunNotice(
            status=STATUS_PARTIAL,
            title="Partial Analysis Success",
            description=(
                "Some analyses could not be completed. Check the report for details."
            ),
            error=_describe_failures(run.failures),
        )
    return RunNotice(
        status=STATUS_COMPLETE,
        title="Analysis Complete",
        description="Document review and foresight finished successfully.",
    )


def _describe_failures(failures: Iterable[tuple[AnalysisKind, str]]) -> str:
    return "\n".join(f"{kind.label} failed. {reason}".strip() for kind, reason in failures)


__all__ = [
    "AnalysisOrchestrator",
    "RunNotice",
    "STATUS_COMPLETE",
    "STATUS_FAILED",
    "STATUS_PARTIAL",
    "summarize_run",
]
