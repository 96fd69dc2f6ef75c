"""Exceptions raised by the pricing workflow."""
from __future__ import annotations

from typing import Iterable, Tuple


class PricingWorkflowError(RuntimeError):
    """Base class for pricing workflow failures."""


class WorkflowClosedError(PricingWorkflowError):
    """Raised when acting on a workflow that is not open."""


class StepActionError(PricingWorkflowError, ValueError):
    """Raised when an action is not available at the current step."""


class SaveInProgressError(PricingWorkflowError):
    """Raised when the session is busy committing its prices."""


class SaveFailedError(PricingWorkflowError):
    """Raised when the save callback fails; the session keeps its state."""


class PendingEntitiesError(PricingWorkflowError):
    """Raised when finalizing entities that were never decided."""

    def __init__(self, entity_ids: Iterable[str]) -> None:
        self.entity_ids: Tuple[str, ...] = tuple(entity_ids)
        super().__init__(f"Entities still pending at finalize: {', '.join(self.entity_ids)}")


__all__ = [
    "PricingWorkflowError",
    "WorkflowClosedError",
    "StepActionError",
    "SaveInProgressError",
    "SaveFailedError",
    "PendingEntitiesError",
]
