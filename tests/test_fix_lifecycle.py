try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import asyncio
import dataclasses

import pytest

from agents.document_review.errors import (
    InvalidTransitionError,
    ItemNotFoundError,
    ProviderError,
)
from agents.document_review.events import ItemTransitioned, ReviewEventBus
from agents.document_review.lifecycle import FixLifecycleManager
from agents.document_review.models import (
    AnalysisKind,
    AnalysisRequest,
    AnalysisRun,
    FixMode,
    ItemCollection,
    ItemState,
    Success,
)
from agents.document_review.session import ReviewSession
from app.schemas.findings import (
    CriticalClause,
    FixedClause,
    FlaggedClauses,
    MissingPoints,
)

CLAUSE = ItemCollection.FLAGGED_CLAUSE
MISSING = ItemCollection.MISSING_POINT


class StubFixProvider:
    def __init__(self, result: FixedClause | None = None, error: Exception | None = None):
        self.result = result or FixedClause(
            fixed_text="Replacement clause.", justification="safer"
        )
        self.error = error
        self.calls: list[dict] = []

    async def fix(self, *, problem, context, original_text, mode):
        self.calls.append(
            {
                "problem": problem,
                "context": context,
                "original_text": original_text,
                "mode": mode,
            }
        )
        if self.error is not None:
            raise self.error
        return self.result


def _session() -> ReviewSession:
    request = AnalysisRequest(
        context="NDA", document_text="The Recipient accepts unlimited liability."
    )
    run = AnalysisRun(
        outcomes={
            AnalysisKind.CLAUSES: Success(
                FlaggedClauses(
                    critical_clauses=[
                        CriticalClause(
                            clause_text="The Recipient accepts unlimited liability.",
                            reason="Uncapped liability for the recipient.",
                        )
                    ]
                )
            ),
            AnalysisKind.MISSING_POINTS: Success(
                MissingPoints(
                    missing_points=["Governing law"],
                    recommendations=["Add a term clause."],
                )
            ),
        }
    )
    return ReviewSession.from_run(request, run, session_id="session-1")


def _snapshot(item) -> dict:
    return dataclasses.asdict(item)


@pytest.mark.asyncio
async def test_propose_rewrites_flagged_clause() -> None:
    session = _session()
    provider = StubFixProvider()
    manager = FixLifecycleManager(provider)
    clause = session.flagged_clauses[0]

    item = await manager.propose(session, CLAUSE, clause.id)

    assert item is clause
    assert item.state is ItemState.PROPOSED
    assert item.current_text == "Replacement clause."
    assert item.current_reason == "safer"
    assert item.original_text == "The Recipient accepts unlimited liability."
    assert not item.fix_loading
    assert provider.calls == [
        {
            "problem": "Uncapped liability for the recipient.",
            "context": "NDA",
            "original_text": "The Recipient accepts unlimited liability.",
            "mode": FixMode.REWRITE,
        }
    ]


@pytest.mark.asyncio
async def test_propose_generates_clause_for_missing_point() -> None:
    session = _session()
    provider = StubFixProvider(
        FixedClause(fixed_text="This Agreement is governed by the laws of Ontario.")
    )
    manager = FixLifecycleManager(provider)
    point = session.missing_points[0]

    await manager.propose(session, MISSING, point.id)

    assert point.state is ItemState.PROPOSED
    assert point.current_text == "This Agreement is governed by the laws of Ontario."
    assert point.justification is None
    assert provider.calls[0]["mode"] is FixMode.GENERATE
    assert provider.calls[0]["original_text"] is None


@pytest.mark.asyncio
async def test_propose_rejected_outside_initial() -> None:
    session = _session()
    provider = StubFixProvider()
    manager = FixLifecycleManager(provider)
    clause = session.flagged_clauses[0]

    await manager.propose(session, CLAUSE, clause.id)
    before = _snapshot(clause)
    with pytest.raises(InvalidTransitionError):
        await manager.propose(session, CLAUSE, clause.id)
    assert _snapshot(clause) == before

    manager.accept(session, CLAUSE, clause.id)
    before = _snapshot(clause)
    with pytest.raises(InvalidTransitionError):
        await manager.propose(session, CLAUSE, clause.id)
    assert _snapshot(clause) == before
    assert len(provider.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("accept_first", [False, True])
async def test_revert_restores_original(accept_first: bool) -> None:
    session = _session()
    manager = FixLifecycleManager(StubFixProvider())
    clause = session.flagged_clauses[0]
    pristine = _snapshot(clause)

    await manager.propose(session, CLAUSE, clause.id)
    if accept_first:
        manager.accept(session, CLAUSE, clause.id)
    manager.revert(session, CLAUSE, clause.id)

    assert clause.state is ItemState.INITIAL
    assert clause.current_text == clause.original_text
    assert _snapshot(clause) == pristine


@pytest.mark.asyncio
async def test_accept_then_revert_round_trip_for_missing_point() -> None:
    session = _session()
    manager = FixLifecycleManager(StubFixProvider())
    point = session.missing_points[0]
    pristine = _snapshot(point)

    await manager.propose(session, MISSING, point.id)
    manager.accept(session, MISSING, point.id)
    assert point.state is ItemState.ACCEPTED
    manager.revert(session, MISSING, point.id)

    assert _snapshot(point) == pristine


def test_accept_and_revert_require_a_proposal() -> None:
    session = _session()
    manager = FixLifecycleManager(StubFixProvider())
    clause_id = session.flagged_clauses[0].id

    with pytest.raises(InvalidTransitionError):
        manager.accept(session, CLAUSE, clause_id)
    with pytest.raises(InvalidTransitionError):
        manager.revert(session, CLAUSE, clause_id)


@pytest.mark.asyncio
async def test_provider_failure_leaves_item_initial_with_error() -> None:
    session = _session()
    events = ReviewEventBus()
    published: list = []
    events.subscribe(published.append)
    manager = FixLifecycleManager(
        StubFixProvider(error=ProviderError("quota exceeded")), events=events
    )
    clause = session.flagged_clauses[0]

    with pytest.raises(ProviderError):
        await manager.propose(session, CLAUSE, clause.id)

    assert clause.state is ItemState.INITIAL
    assert not clause.fix_loading
    assert clause.last_error == "quota exceeded"
    assert clause.current_text == clause.original_text
    transitions = [event for event in published if isinstance(event, ItemTransitioned)]
    assert [event.fix_loading for event in transitions] == [True, False]
    assert transitions[-1].error == "quota exceeded"


@pytest.mark.asyncio
async def test_unexpected_provider_exception_is_wrapped() -> None:
    session = _session()
    manager = FixLifecycleManager(StubFixProvider(error=RuntimeError("socket closed")))
    clause = session.flagged_clauses[0]

    with pytest.raises(ProviderError) as excinfo:
        await manager.propose(session, CLAUSE, clause.id)

    assert excinfo.value.reason == "socket closed"
    assert clause.last_error == "socket closed"


@pytest.mark.asyncio
async def test_successful_fix_clears_previous_error() -> None:
    session = _session()
    provider = StubFixProvider(error=ProviderError("temporary"))
    manager = FixLifecycleManager(provider)
    clause = session.flagged_clauses[0]

    with pytest.raises(ProviderError):
        await manager.propose(session, CLAUSE, clause.id)
    provider.error = None
    await manager.propose(session, CLAUSE, clause.id)

    assert clause.state is ItemState.PROPOSED
    assert clause.last_error is None


@pytest.mark.asyncio
async def test_concurrent_propose_on_same_item_is_rejected() -> None:
    release = asyncio.Event()

    class SlowProvider(StubFixProvider):
        async def fix(self, **kwargs):
            await release.wait()
            return await super().fix(**kwargs)

    session = _session()
    provider = SlowProvider()
    manager = FixLifecycleManager(provider)
    clause = session.flagged_clauses[0]

    first = asyncio.create_task(manager.propose(session, CLAUSE, clause.id))
    await asyncio.sleep(0)
    assert clause.fix_loading

    with pytest.raises(InvalidTransitionError):
        await manager.propose(session, CLAUSE, clause.id)

    release.set()
    await first
    assert clause.state is ItemState.PROPOSED
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_read_only_missing_points_cannot_be_fixed() -> None:
    session = _session()
    provider = StubFixProvider()
    manager = FixLifecycleManager(provider)
    recommendation = session.missing_points[1]

    with pytest.raises(InvalidTransitionError):
        await manager.propose(session, MISSING, recommendation.id)
    assert provider.calls == []


@pytest.mark.asyncio
async def test_unknown_item_id() -> None:
    session = _session()
    manager = FixLifecycleManager(StubFixProvider())

    with pytest.raises(ItemNotFoundError):
        await manager.propose(session, CLAUSE, "clause-missing")
