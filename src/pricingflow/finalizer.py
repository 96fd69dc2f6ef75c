"""Collapse session decisions into final prices and commit them."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple

from .config import RetryPolicy
from .exceptions import PendingEntitiesError, SaveFailedError, SaveInProgressError
from .models import DecisionStatus, PriceableEntity, REVERTING_STATUSES
from .retry import execute_with_retry

LOGGER = logging.getLogger(__name__)

SaveCallback = Callable[[List[PriceableEntity]], Awaitable[None]]


def finalize_entities(
    entities: Iterable[PriceableEntity],
    pending_policy: str = "revert",
) -> Tuple[PriceableEntity, ...]:
    """Resolve each entity's persisted price from its decision.

    Skipped and rejected entities fall back to their base price, approved ones
    keep the proposal.  Entities still pending follow ``pending_policy``:
    ``"revert"`` treats them like rejections, ``"keep"`` like approvals and
    ``"error"`` raises :class:`PendingEntitiesError`.
    """
    entities = tuple(entities)
    pending = [entity.id for entity in entities if entity.decision_status == DecisionStatus.PENDING]
    if pending:
        if pending_policy == "error":
            raise PendingEntitiesError(pending)
        LOGGER.warning("Finalizing %d pending entities with policy %s", len(pending), pending_policy)

    final: List[PriceableEntity] = []
    for entity in entities:
        status = entity.decision_status
        if status in REVERTING_STATUSES or (status == DecisionStatus.PENDING and pending_policy == "revert"):
            final.append(entity.evolve(proposed_price=entity.base_price))
        else:
            final.append(entity.evolve(proposed_price=entity.effective_price))
    return tuple(final)


class Finalizer:
    """Commits finalized prices through an external save callback."""

    def __init__(self, policy: Optional[RetryPolicy] = None, pending_policy: str = "revert") -> None:
        self.policy = policy or RetryPolicy()
        self.pending_policy = pending_policy
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    async def commit(
        self,
        entities: Sequence[PriceableEntity],
        save: SaveCallback,
    ) -> Tuple[PriceableEntity, ...]:
        if self._busy:
            raise SaveInProgressError("A save is already in progress for this workflow")
        final = finalize_entities(entities, self.pending_policy)
        self._busy = True
        try:
            LOGGER.info("Saving %d finalized entities", len(final))
            await execute_with_retry(
                lambda: save(list(final)),
                policy=self.policy,
                description="pricing save",
                logger=LOGGER,
            )
        except Exception as exc:
            LOGGER.error("Pricing save failed: %s", exc)
            raise SaveFailedError(f"Saving finalized prices failed: {exc}") from exc
        finally:
            self._busy = False
        return final


__all__ = ["Finalizer", "SaveCallback", "finalize_entities"]
