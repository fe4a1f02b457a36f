"""
Sequential auto-fix of every eligible item in a review session.

Items are fixed strictly one at a time: flagged clauses first, then fixable
missing points, each in its existing order. The call for item ``k + 1`` does
not start until the call for item ``k`` has settled, and a failed item never
stops the remaining ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Optional, Tuple

from agents.document_review.errors import (
    InputContractError,
    InvalidTransitionError,
    ProviderError,
)
from agents.document_review.events import BatchCompleted, BatchProgress, ReviewEventBus
from agents.document_review.lifecycle import FixLifecycleManager
from agents.document_review.models import ReviewItem
from agents.document_review.session import ReviewSession

logger = logging.getLogger(__name__)

COMPLETED_MESSAGE = "Auto-fix process completed."
NOTHING_TO_FIX_MESSAGE = "No items require auto-fixing."


def progress_message(item: ReviewItem, index: int, total: int) -> str:
    return f"Fixing {item.label} {index} of {total}..."


@dataclass(frozen=True, slots=True)
class BatchStep:
    """Result of fixing one item within a batch."""

    item: ReviewItem
    index: int
    total: int
    progress: str
    succeeded: bool
    error: Optional[str] = None


@dataclass(slots=True)
class BatchSummary:
    succeeded: int = 0
    failed: int = 0
    message: str = NOTHING_TO_FIX_MESSAGE
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.succeeded + self.failed


class BatchFixSequencer:
    """Drive ``FixLifecycleManager`` over all eligible items, one at a time."""

    def __init__(
        self,
        lifecycle: FixLifecycleManager,
        events: Optional[ReviewEventBus] = None,
    ) -> None:
        self._lifecycle = lifecycle
        self._events = events or ReviewEventBus()

    async def steps(self, session: ReviewSession) -> AsyncIterator[BatchStep]:
        """Yield one ``BatchStep`` per eligible item as each fix settles."""
        eligible = session.eligible_items()
        total = len(eligible)
        for index, item in enumerate(eligible, start=1):
            progress = progress_message(item, index, total)
            announced: List[bool] = []

            def _announce() -> None:
                announced.append(True)
                self._events.publish(
                    BatchProgress(
                        session_id=session.session_id,
                        message=progress,
                        index=index,
                        total=total,
                    )
                )
                logger.info(progress, extra={"session_id": session.session_id})

            try:
                await self._lifecycle.apply_fix(session, item, on_started=_announce)
            except (ProviderError, InvalidTransitionError, InputContractError) as exc:
                # Items rejected before the call still get their progress event.
                if not announced:
                    _announce()
                logger.warning(
                    "Auto-fix of %s %s failed: %s",
                    item.label,
                    item.id,
                    exc,
                    extra={"session_id": session.session_id},
                )
                yield BatchStep(
                    item=item,
                    index=index,
                    total=total,
                    progress=progress,
                    succeeded=False,
                    error=str(exc),
                )
                continue
            yield BatchStep(
                item=item,
                index=index,
                total=total,
                progress=progress,
                succeeded=True,
            )

    async def run(
        self,
        session: ReviewSession,
        on_step: Optional[Callable[[BatchStep], None]] = None,
    ) -> BatchSummary:
        """Drain ``steps`` and publish ``BatchCompleted``, even for an empty batch."""
        summary = BatchSummary()
        if not session.eligible_items():
            logger.info("No eligible items to auto-fix", extra={"session_id": session.session_id})
        else:
            async for step in self.steps(session):
                if step.succeeded:
                    summary.succeeded += 1
                else:
                    summary.failed += 1
                    summary.failures.append((step.item.id, step.error or ""))
                if on_step is not None:
                    on_step(step)

            summary.message = COMPLETED_MESSAGE
            logger.info(
                "Auto-fix finished: %d succeeded, %d failed",
                summary.succeeded,
                summary.failed,
                extra={"session_id": session.session_id},
            )
        self._events.publish(
            BatchCompleted(
                session_id=session.session_id,
                succeeded=summary.succeeded,
                failed=summary.failed,
                message=summary.message,
            )
        )
        return summary


__all__ = [
    "BatchFixSequencer",
    "BatchStep",
    "BatchSummary",
    "COMPLETED_MESSAGE",
    "NOTHING_TO_FIX_MESSAGE",
    "progress_message",
]
