"""Error taxonomy for the document review core."""

from __future__ import annotations


class ReviewError(Exception):
    """Base class for document review failures."""


class ProviderError(ReviewError):
    """Raised when the reasoning provider cannot fulfil an analysis or fix."""

    def __init__(self, reason: str, *, kind: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.kind = kind


class InvalidTransitionError(ReviewError):
    """Raised when a fix lifecycle operation is not allowed in the item's state."""


class InputContractError(ReviewError, ValueError):
    """Raised when a request is missing data required by the contract."""


class ItemNotFoundError(ReviewError, LookupError):
    """Raised when an item id is unknown to the review session."""


__all__ = [
    "InputContractError",
    "InvalidTransitionError",
    "ItemNotFoundError",
    "ProviderError",
    "ReviewError",
]
