"""
Propose / accept / revert state machine for a single review item.

``propose`` is the only operation that talks to the fix provider. It flips the
item's ``fix_loading`` flag before awaiting the provider, so a second
``propose`` on the same item is rejected while the first is in flight.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from agents.document_review.errors import (
    InputContractError,
    InvalidTransitionError,
    ProviderError,
)
from agents.document_review.events import ItemTransitioned, ReviewEventBus
from agents.document_review.models import ItemCollection, ItemState, ReviewItem
from agents.document_review.protocol import FixProvider
from agents.document_review.session import ReviewSession

logger = logging.getLogger(__name__)


class FixLifecycleManager:
    """Apply fix lifecycle transitions to items of a review session."""

    def __init__(
        self,
        fix_provider: FixProvider,
        events: Optional[ReviewEventBus] = None,
    ) -> None:
        self._provider = fix_provider
        self._events = events or ReviewEventBus()

    async def propose(
        self,
        session: ReviewSession,
        collection: ItemCollection,
        item_id: str,
    ) -> ReviewItem:
        """Request a fix for an ``initial`` item and move it to ``proposed``.

        Raises ``ProviderError`` when the provider fails; the item then stays
        ``initial`` with ``last_error`` set.
        """
        item = session.get_item(collection, item_id)
        await self.apply_fix(session, item)
        return item

    def accept(
        self,
        session: ReviewSession,
        collection: ItemCollection,
        item_id: str,
    ) -> ReviewItem:
        item = session.get_item(collection, item_id)
        if item.state is not ItemState.PROPOSED:
            raise InvalidTransitionError(
                f"Cannot accept {item.label} '{item.id}' in state '{item.state.value}'."
            )
        self._transition(session, item, ItemState.ACCEPTED)
        return item

    def revert(
        self,
        session: ReviewSession,
        collection: ItemCollection,
        item_id: str,
    ) -> ReviewItem:
        item = session.get_item(collection, item_id)
        if item.state not in (ItemState.PROPOSED, ItemState.ACCEPTED):
            raise InvalidTransitionError(
                f"Cannot revert {item.label} '{item.id}' in state '{item.state.value}'."
            )
        item.restore()
        item.last_error = None
        self._transition(session, item, ItemState.INITIAL)
        return item

    async def apply_fix(
        self,
        session: ReviewSession,
        item: ReviewItem,
        on_started: Optional[Callable[[], None]] = None,
    ) -> None:
        """Run one provider call for ``item``; shared by single and batch fixing.

        ``on_started`` runs once ``fix_loading`` is set, just before the
        provider is awaited.
        """
        if not item.is_fixable:
            raise InvalidTransitionError(f"{item.label.capitalize()} '{item.id}' is read-only.")
        if item.state is not ItemState.INITIAL:
            raise InvalidTransitionError(
                f"Cannot propose a fix for {item.label} '{item.id}' "
                f"in state '{item.state.value}'."
            )
        if item.fix_loading:
            raise InvalidTransitionError(
                f"A fix for {item.label} '{item.id}' is already in progress."
            )

        fix_request = item.fix_request(session.context)
        item.fix_loading = True
        self._publish(session, item, previous=ItemState.INITIAL)
        if on_started is not None:
            on_started()

        try:
            fixed = await self._provider.fix(
                problem=fix_request.problem,
                context=fix_request.context,
                original_text=fix_request.original_text,
                mode=fix_request.mode,
            )
        except InputContractError:
            item.fix_loading = False
            self._publish(session, item, previous=ItemState.INITIAL)
            raise
        except Exception as exc:
            reason = exc.reason if isinstance(exc, ProviderError) else str(exc)
            reason = reason or "AI failed to generate a fixed clause."
            item.fix_loading = False
            item.last_error = reason
            logger.warning(
                "Auto-fix failed: %s",
                reason,
                extra={"session_id": session.session_id, "item_id": item.id},
            )
            self._publish(session, item, previous=ItemState.INITIAL, error=reason)
            if isinstance(exc, ProviderError):
                raise
            raise ProviderError(reason) from exc

        item.apply_fix(fixed)
        item.fix_loading = False
        item.last_error = None
        self._transition(session, item, ItemState.PROPOSED)

    def _transition(
        self, session: ReviewSession, item: ReviewItem, target: ItemState
    ) -> None:
        previous = item.state
        item.state = target
        session.touch()
        logger.debug(
            "Item %s moved %s -> %s",
            item.id,
            previous.value,
            target.value,
            extra={"session_id": session.session_id},
        )
        self._publish(session, item, previous=previous)

    def _publish(
        self,
        session: ReviewSession,
        item: ReviewItem,
        *,
        previous: ItemState,
        error: Optional[str] = None,
    ) -> None:
        self._events.publish(
            ItemTransitioned(
                session_id=session.session_id,
                collection=item.collection,
                item_id=item.id,
                previous=previous,
                current=item.state,
                fix_loading=item.fix_loading,
                error=error,
            )
        )


__all__ = ["FixLifecycleManager"]
