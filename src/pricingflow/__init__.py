"""Multi-step pricing approval workflow for order items and proofing assets."""

from .config import RetryPolicy, WorkflowConfig
from .exceptions import (
    PendingEntitiesError,
    PricingWorkflowError,
    SaveFailedError,
    SaveInProgressError,
    StepActionError,
    WorkflowClosedError,
)
from .finalizer import Finalizer, finalize_entities
from .models import DecisionStatus, PriceableEntity, WorkflowStep
from .state import EntityPriceState
from .steps import WorkflowSession
from .workflow import PricingWorkflow, WorkflowResult

__all__ = [
    "RetryPolicy",
    "WorkflowConfig",
    "PendingEntitiesError",
    "PricingWorkflowError",
    "SaveFailedError",
    "SaveInProgressError",
    "StepActionError",
    "WorkflowClosedError",
    "Finalizer",
    "finalize_entities",
    "DecisionStatus",
    "PriceableEntity",
    "WorkflowStep",
    "EntityPriceState",
    "WorkflowSession",
    "PricingWorkflow",
    "WorkflowResult",
]
