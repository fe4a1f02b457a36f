try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64

import httpx
import pytest

from app.core.config import ReviewSettings
from app.main import app
from app.schemas.findings import (
    ChatReply,
    CriticalClause,
    DocumentSummary,
    FixedClause,
    FlaggedClauses,
    ImprovementSuggestions,
    LegalForesight,
    MissingPoints,
)
from app.services import DocumentReviewService, ReviewSessionStore
from agents.document_review.batch import BatchFixSequencer
from agents.document_review.errors import ProviderError
from agents.document_review.lifecycle import FixLifecycleManager
from agents.document_review.models import AnalysisKind
from agents.document_review.orchestrator import AnalysisOrchestrator


class StubReviewProvider:
    def __init__(self) -> None:
        self.failing_kinds: set[AnalysisKind] = set()
        self.fix_error: Exception | None = None
        self.fix_calls = 0

    async def analyze(self, kind, request):
        if kind in self.failing_kinds:
            raise ProviderError("provider unavailable", kind=kind.value)
        return {
            AnalysisKind.SUMMARY: DocumentSummary(overall_summary="Mutual NDA."),
            AnalysisKind.CLAUSES: FlaggedClauses(
                critical_clauses=[
                    CriticalClause(
                        clause_text="Recipient bears unlimited liability.",
                        reason="Uncapped liability.",
                        risk_tags=["Financial Risk"],
                    )
                ]
            ),
            AnalysisKind.SUGGESTIONS: ImprovementSuggestions(suggestions=["Add a cap."]),
            AnalysisKind.MISSING_POINTS: MissingPoints(
                missing_points=["Governing law"],
                recommendations=["Define confidential information."],
                summary="Two gaps.",
            ),
            AnalysisKind.OUTCOMES: LegalForesight(overall_risk_assessment="HIGH: uncapped"),
        }[kind]

    async def fix(self, *, problem, context, original_text, mode):
        self.fix_calls += 1
        if self.fix_error is not None:
            raise self.fix_error
        return FixedClause(fixed_text=f"Fixed {problem}", justification="safer")

    async def chat(self, request, question):
        return ChatReply(answer=f"{request.context}: {question}")


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture()
def provider():
    from app import dependencies

    stub = StubReviewProvider()
    lifecycle = FixLifecycleManager(stub)
    service = DocumentReviewService(
        orchestrator=AnalysisOrchestrator(stub),
        lifecycle=lifecycle,
        sequencer=BatchFixSequencer(lifecycle),
        chat_provider=stub,
        store=ReviewSessionStore(ttl_seconds=60),
        settings=ReviewSettings(
            max_document_bytes=64,
            allowed_mime_types=("text/plain", "application/pdf"),
        ),
    )

    app.dependency_overrides.clear()
    app.dependency_overrides[dependencies.get_review_service] = lambda: service

    yield stub

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(provider):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


async def _start_review(client, **payload) -> dict:
    body = {"document_text": "Recipient bears unlimited liability.", "context": "NDA"}
    body.update(payload)
    response = await client.post("/api/reviews", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _item_url(review: dict, collection: str, item_id: str, action: str) -> str:
    return f"/api/reviews/{review['session_id']}/items/{collection}/{item_id}/{action}"


async def test_healthcheck(client):
    response = await client.get("/api/health")
    assert response.json() == {"status": "ok", "environment": "test"}


async def test_start_review_returns_items(client):
    review = await _start_review(client)

    assert review["context"] == "NDA"
    assert review["notice"]["status"] == "complete"
    assert len(review["analyses"]) == 5
    assert all(entry["status"] == "success" for entry in review["analyses"])
    (clause,) = review["flagged_clauses"]
    assert clause["state"] == "initial"
    assert clause["current_text"] == clause["original_text"]
    assert [point["kind"] for point in review["missing_points"]] == [
        "missing",
        "recommendation",
        "summary",
    ]

    fetched = await client.get(f"/api/reviews/{review['session_id']}")
    assert fetched.status_code == 200
    assert fetched.json()["flagged_clauses"] == review["flagged_clauses"]


async def test_context_is_resolved_from_filename(client):
    review = await _start_review(
        client, context=None, filename="Employment_Agreement_v2.pdf"
    )
    assert review["context"] == "Agreement Document"


async def test_partial_failure_is_reported(client, provider):
    provider.failing_kinds = {AnalysisKind.OUTCOMES}

    review = await _start_review(client)

    assert review["notice"]["status"] == "partial"
    assert review["notice"]["title"] == "Partial Analysis Success"
    outcome = next(entry for entry in review["analyses"] if entry["kind"] == "outcomes")
    assert outcome == {
        "kind": "outcomes",
        "status": "failure",
        "payload": None,
        "error": "provider unavailable",
    }


async def test_review_rejects_missing_document(client):
    response = await client.post("/api/reviews", json={"context": "NDA"})
    assert response.status_code == 422


async def test_review_rejects_unsupported_mime_type(client):
    response = await client.post(
        "/api/reviews",
        json={
            "document_b64": base64.b64encode(b"GIF89a").decode("utf-8"),
            "mime_type": "image/gif",
        },
    )
    assert response.status_code == 415


async def test_review_rejects_oversized_document(client):
    response = await client.post("/api/reviews", json={"document_text": "x" * 65})
    assert response.status_code == 413


async def test_unknown_session_is_404(client):
    response = await client.get("/api/reviews/does-not-exist")
    assert response.status_code == 404


async def test_propose_accept_revert_flow(client):
    review = await _start_review(client)
    clause_id = review["flagged_clauses"][0]["id"]

    proposed = await client.post(_item_url(review, "flagged_clause", clause_id, "propose"))
    assert proposed.status_code == 200
    assert proposed.json()["state"] == "proposed"
    assert proposed.json()["current_text"] == "Fixed Uncapped liability."
    assert proposed.json()["current_reason"] == "safer"

    again = await client.post(_item_url(review, "flagged_clause", clause_id, "propose"))
    assert again.status_code == 409

    accepted = await client.post(_item_url(review, "flagged_clause", clause_id, "accept"))
    assert accepted.json()["state"] == "accepted"

    reverted = await client.post(_item_url(review, "flagged_clause", clause_id, "revert"))
    body = reverted.json()
    assert body["state"] == "initial"
    assert body["current_text"] == body["original_text"]
    assert body["current_reason"] == body["original_reason"]


async def test_accept_without_proposal_conflicts(client):
    review = await _start_review(client)
    point_id = review["missing_points"][0]["id"]

    response = await client.post(_item_url(review, "missing_point", point_id, "accept"))
    assert response.status_code == 409


async def test_unknown_item_and_collection(client):
    review = await _start_review(client)

    missing = await client.post(_item_url(review, "flagged_clause", "nope", "propose"))
    assert missing.status_code == 404

    bad_collection = await client.post(_item_url(review, "paragraph", "nope", "propose"))
    assert bad_collection.status_code == 422


async def test_failed_fix_is_reported_and_kept_on_item(client, provider):
    provider.fix_error = ProviderError("quota exceeded")
    review = await _start_review(client)
    clause_id = review["flagged_clauses"][0]["id"]

    response = await client.post(_item_url(review, "flagged_clause", clause_id, "propose"))
    assert response.status_code == 502
    assert response.json()["detail"] == "quota exceeded"

    snapshot = (await client.get(f"/api/reviews/{review['session_id']}")).json()
    clause = snapshot["flagged_clauses"][0]
    assert clause["state"] == "initial"
    assert clause["fix_loading"] is False
    assert clause["last_error"] == "quota exceeded"


async def test_auto_fix_runs_every_eligible_item(client, provider):
    review = await _start_review(client)

    response = await client.post(f"/api/reviews/{review['session_id']}/auto-fix")

    body = response.json()
    assert body["succeeded"] == 2
    assert body["failed"] == 0
    assert body["message"] == "Auto-fix process completed."
    assert [step["progress"] for step in body["steps"]] == [
        "Fixing flagged clause 1 of 2...",
        "Fixing missing point 2 of 2...",
    ]
    assert provider.fix_calls == 2

    second = await client.post(f"/api/reviews/{review['session_id']}/auto-fix")
    assert second.json() == {
        "succeeded": 0,
        "failed": 0,
        "message": "No items require auto-fixing.",
        "steps": [],
    }
    assert provider.fix_calls == 2


async def test_chat_with_document(client):
    review = await _start_review(client)

    response = await client.post(
        f"/api/reviews/{review['session_id']}/chat",
        json={"question": "Who bears liability?"},
    )
    assert response.status_code == 200
    assert response.json() == {"answer": "NDA: Who bears liability?"}
