"""Session orchestration for the pricing approval workflow."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from . import decisions, steps
from .config import WorkflowConfig
from .exceptions import SaveFailedError, SaveInProgressError, StepActionError, WorkflowClosedError
from .finalizer import Finalizer, SaveCallback
from .models import DecisionStatus, PriceableEntity, WorkflowStep
from .state import EntityPriceState

LOGGER = logging.getLogger(__name__)

CloseCallback = Callable[[], None]
ErrorCallback = Callable[[Exception], None]


@dataclass
class WorkflowResult:
    entities: Tuple[PriceableEntity, ...]
    approved_count: int = field(init=False)
    rejected_count: int = field(init=False)
    skipped_count: int = field(init=False)
    reverted_count: int = field(init=False)

    def __post_init__(self) -> None:
        statuses = [entity.decision_status for entity in self.entities]
        self.approved_count = statuses.count(DecisionStatus.APPROVED)
        self.rejected_count = statuses.count(DecisionStatus.REJECTED)
        self.skipped_count = statuses.count(DecisionStatus.SKIPPED)
        self.reverted_count = sum(
            1 for entity in self.entities if entity.decision_status != DecisionStatus.APPROVED
        )


class PricingWorkflow:
    """Drives one entity collection through selection, configuration, approval and summary.

    A workflow instance holds at most one open session.  ``open`` copies the
    caller's entities, so nothing the session does is visible to the caller
    until ``confirm`` hands the finalized collection to ``on_save``.
    """

    def __init__(self, config: Optional[WorkflowConfig] = None, on_error: Optional[ErrorCallback] = None) -> None:
        self.config = config or WorkflowConfig()
        self.on_error = on_error
        self.state = EntityPriceState()
        self.finalizer = Finalizer(self.config.save, pending_policy=self.config.pending_at_finalize)
        self._step = WorkflowStep.SELECTION
        self._is_open = False
        self._on_save: Optional[SaveCallback] = None
        self._on_close: Optional[CloseCallback] = None

    # -- session lifecycle -------------------------------------------------

    def open(
        self,
        entities: Iterable[PriceableEntity],
        on_save: SaveCallback,
        on_close: Optional[CloseCallback] = None,
    ) -> None:
        self._ensure_idle()
        self.state.initialize(entities)
        self._step = WorkflowStep.SELECTION
        self._on_save = on_save
        self._on_close = on_close
        self._is_open = True
        LOGGER.info("Opened pricing workflow with %d entities", len(self.state))

    def close(self) -> None:
        """Discard the session without saving."""
        self._ensure_open()
        self._ensure_idle()
        LOGGER.info("Closing pricing workflow at step %s without saving", self._step.value)
        self._teardown()

    async def confirm(self) -> Optional[WorkflowResult]:
        """Finalize and save; closes the session only when the save succeeds."""
        self._ensure_open()
        if self._step is not WorkflowStep.SUMMARY:
            raise StepActionError(f"Prices can only be confirmed at the summary step, not {self._step.value}")
        assert self._on_save is not None
        try:
            final = await self.finalizer.commit(self.state.entities, self._on_save)
        except SaveFailedError as exc:
            if self.on_error is None:
                raise
            self.on_error(exc)
            return None
        result = WorkflowResult(entities=final)
        LOGGER.info(
            "Saved pricing workflow: %d approved, %d rejected, %d skipped",
            result.approved_count,
            result.rejected_count,
            result.skipped_count,
        )
        self._teardown()
        return result

    def _teardown(self) -> None:
        on_close = self._on_close
        self._is_open = False
        self._on_save = None
        self._on_close = None
        self.state.entities = ()
        self._step = WorkflowStep.SELECTION
        if on_close:
            on_close()

    # -- views ---------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_saving(self) -> bool:
        return self.finalizer.is_busy

    @property
    def step(self) -> WorkflowStep:
        return self._step

    @property
    def entities(self) -> Tuple[PriceableEntity, ...]:
        return self.state.entities

    @property
    def session(self) -> steps.WorkflowSession:
        return steps.WorkflowSession(self._step, self.state.entities)

    @property
    def visible_entities(self) -> Tuple[PriceableEntity, ...]:
        return steps.visible_entities(self._step, self.state.entities)

    @property
    def can_advance(self) -> bool:
        return self._is_open and steps.can_advance(self._step, self.state.entities)

    def undecided_ids(self) -> List[str]:
        return [entity.id for entity in self.state.entities if entity.is_priced and not entity.is_decided]

    # -- navigation ------------------------------------------------------------

    def advance(self) -> bool:
        self._ensure_open()
        self._ensure_idle()
        target = steps.next_step(self._step, self.state.entities)
        if target is self._step:
            LOGGER.debug("Cannot advance from %s; undecided: %s", self._step.value, self.undecided_ids())
            return False
        LOGGER.info("Pricing workflow step %s -> %s", self._step.value, target.value)
        self._step = target
        return True

    def back(self) -> bool:
        self._ensure_open()
        self._ensure_idle()
        target = steps.previous_step(self._step, self.state.entities)
        if target is self._step:
            return False
        LOGGER.info("Pricing workflow step %s -> %s", self._step.value, target.value)
        self._step = target
        return True

    # -- decisions ---------------------------------------------------------------

    def mark_for_pricing(self, entity_id: str) -> None:
        self._check_action("mark_for_pricing", entity_id)
        self.state.apply(decisions.mark_for_pricing, entity_id)

    def mark_skipped(self, entity_id: str) -> None:
        self._check_action("mark_skipped", entity_id)
        self.state.apply(decisions.mark_skipped, entity_id)

    def select(self, entity_id: str, should_price: bool) -> None:
        if should_price:
            self.mark_for_pricing(entity_id)
        else:
            self.mark_skipped(entity_id)

    def set_price(self, entity_id: str, value: object) -> None:
        self._check_action("set_price", entity_id)
        self.state.apply(decisions.set_proposed_price, entity_id, value, self.config.invalid_price_fallback)

    def approve(self, entity_id: str) -> None:
        self._check_action("approve", entity_id)
        self.state.apply(decisions.approve, entity_id)

    def reject(self, entity_id: str) -> None:
        self._check_action("reject", entity_id)
        self.state.apply(decisions.reject, entity_id)

    # -- guards --------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if not self._is_open:
            raise WorkflowClosedError("Pricing workflow is not open")

    def _ensure_idle(self) -> None:
        if self.finalizer.is_busy:
            raise SaveInProgressError("Pricing workflow is saving")

    def _check_action(self, action: str, entity_id: str) -> None:
        self._ensure_open()
        self._ensure_idle()
        if action not in steps.allowed_actions(self._step):
            raise StepActionError(f"{action} is not available at the {self._step.value} step")
        if self.state.get(entity_id) is not None and entity_id not in {e.id for e in self.visible_entities}:
            raise StepActionError(f"Entity {entity_id} is not editable at the {self._step.value} step")


__all__ = ["PricingWorkflow", "WorkflowResult"]
