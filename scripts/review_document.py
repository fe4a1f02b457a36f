#!/usr/bin/env python
"""Review a local legal document from the command line.

Runs every analysis against the file, prints the flagged clauses and missing
points, and optionally auto-fixes every eligible item::

    python -m scripts.review_document contracts/Employment_Agreement.pdf --auto-fix
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agents.document_review.batch import BatchFixSequencer, BatchStep  # noqa: E402
from agents.document_review.context import resolve_document_context  # noqa: E402
from agents.document_review.errors import InputContractError  # noqa: E402
from agents.document_review.lifecycle import FixLifecycleManager  # noqa: E402
from agents.document_review.models import AnalysisRequest  # noqa: E402
from agents.document_review.orchestrator import (  # noqa: E402
    AnalysisOrchestrator,
    summarize_run,
)
from agents.document_review.session import ReviewSession  # noqa: E402

EXIT_OK = 0
EXIT_ANALYSIS_FAILED = 1
EXIT_USAGE_ERROR = 2

_TEXT_SUFFIXES = {".txt", ".md"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run an AI review of a legal document.")
    parser.add_argument("path", type=Path, help="Document to review (text, PDF or image).")
    parser.add_argument(
        "--context",
        default=None,
        help="Describe the document, e.g. 'NDA for a startup partnership'.",
    )
    parser.add_argument(
        "--auto-fix",
        action="store_true",
        help="Propose a fix for every flagged clause and missing point.",
    )
    return parser


def load_request(path: Path, context: Optional[str] = None) -> AnalysisRequest:
    """Read ``path`` into an ``AnalysisRequest`` with a resolved context."""
    resolved = resolve_document_context(context, path.name)
    if path.suffix.lower() in _TEXT_SUFFIXES:
        return AnalysisRequest(
            context=resolved, document_text=path.read_text(encoding="utf-8")
        )
    mime_type, _ = mimetypes.guess_type(path.name)
    return AnalysisRequest(
        context=resolved,
        document_binary=path.read_bytes(),
        mime_type=mime_type or "application/pdf",
    )


def _default_tools() -> Any:
    from app.clients import GeminiClient
    from app.core.config import get_settings
    from app.core.logging import configure_logging
    from agents.document_review.tools import ReviewTools

    settings = get_settings()
    configure_logging(settings.log_level)
    return ReviewTools(GeminiClient(settings.gemini))


def _print_session(session: ReviewSession, out: TextIO) -> None:
    print(f"Context: {session.context}", file=out)
    if session.flagged_clauses:
        print("\nFlagged clauses:", file=out)
        for item in session.flagged_clauses:
            tags = ", ".join(sorted(tag.value for tag in item.risk_tags)) or "untagged"
            print(f"- [{tags}] {item.current_text}", file=out)
            print(f"    {item.current_reason}", file=out)
    if session.missing_points:
        print("\nMissing points:", file=out)
        for item in session.missing_points:
            print(f"- ({item.kind.value}) {item.current_text}", file=out)


async def review(
    request: AnalysisRequest,
    tools: Any,
    *,
    auto_fix: bool = False,
    filename: Optional[str] = None,
    out: Optional[TextIO] = None,
) -> int:
    out = out or sys.stdout
    run = await AnalysisOrchestrator(tools).run(request)
    notice = summarize_run(run)
    print(f"{notice.title}: {notice.description}", file=out)
    if notice.error:
        print(notice.error, file=out)
    if run.all_failed:
        return EXIT_ANALYSIS_FAILED

    session = ReviewSession.from_run(request, run, filename=filename)
    _print_session(session, out)

    if auto_fix:
        lifecycle = FixLifecycleManager(tools)

        def _report(step: BatchStep) -> None:
            outcome = "done" if step.succeeded else f"failed ({step.error})"
            print(f"{step.progress} {outcome}", file=out)

        print("", file=out)
        summary = await BatchFixSequencer(lifecycle).run(session, on_step=_report)
        print(
            f"{summary.message} {summary.succeeded} succeeded, {summary.failed} failed.",
            file=out,
        )
        _print_session(session, out)
    return EXIT_OK


def main(argv: list[str] | None = None, tools: Any = None) -> int:
    args = _build_parser().parse_args(argv)
    path: Path = args.path
    if not path.is_file():
        print(f"Document {path} does not exist.", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        request = load_request(path, args.context)
    except InputContractError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE_ERROR

    return asyncio.run(
        review(
            request,
            tools or _default_tools(),
            auto_fix=args.auto_fix,
            filename=path.name,
        )
    )


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
