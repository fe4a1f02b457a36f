"""Process-local storage for document review sessions with TTL pruning."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from agents.document_review.session import ReviewSession


class ReviewSessionStore:
    """Keep review sessions in memory until they sit idle past the TTL.

    Sessions are never persisted; a restart discards every review.
    """

    def __init__(self, ttl_seconds: int = 3600) -> None:
        self._ttl = ttl_seconds
        self._sessions: Dict[str, ReviewSession] = {}

    def save(self, session: ReviewSession) -> ReviewSession:
        self._prune()
        session.touch()
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[ReviewSession]:
        self._prune()
        return self._sessions.get(session_id)

    def _prune(self) -> None:
        threshold = datetime.now(timezone.utc) - timedelta(seconds=self._ttl)
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.updated_at < threshold and not _has_fix_in_flight(session)
        ]
        for session_id in expired:
            del self._sessions[session_id]


def _has_fix_in_flight(session: ReviewSession) -> bool:
    return any(
        item.fix_loading for item in (*session.flagged_clauses, *session.missing_points)
    )


__all__ = ["ReviewSessionStore"]
