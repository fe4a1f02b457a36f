"""Resolve the document context string shared by every analysis and fix."""

from __future__ import annotations

from typing import Optional, Tuple

DEFAULT_CONTEXT = "General legal document review"
UNMATCHED_FILENAME_CONTEXT = "General Legal Document"

# Evaluated in order; the first rule with a matching substring wins.
_FILENAME_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("agreement",), "Agreement Document"),
    (("offer", "letter"), "Offer Letter or Similar"),
    (("sale",), "Sale Document"),
)


def resolve_document_context(
    user_context: Optional[str] = None,
    filename: Optional[str] = None,
) -> str:
    """Return a non-empty context label for the document under review."""
    cleaned = (user_context or "").strip()
    if cleaned:
        return cleaned

    if not filename or not filename.strip():
        return DEFAULT_CONTEXT

    lowered = filename.lower()
    for needles, label in _FILENAME_RULES:
        if any(needle in lowered for needle in needles):
            return label
    return UNMATCHED_FILENAME_CONTEXT


__all__ = ["DEFAULT_CONTEXT", "UNMATCHED_FILENAME_CONTEXT", "resolve_document_context"]
