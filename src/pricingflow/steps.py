"""Step sequencing for the four-step pricing workflow."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Tuple

from .models import PriceableEntity, WorkflowStep

ACTIONS_BY_STEP: Dict[WorkflowStep, FrozenSet[str]] = {
    WorkflowStep.SELECTION: frozenset({"mark_for_pricing", "mark_skipped"}),
    WorkflowStep.CONFIGURATION: frozenset({"set_price"}),
    WorkflowStep.APPROVAL: frozenset({"approve", "reject"}),
    WorkflowStep.SUMMARY: frozenset(),
}


def has_priced(entities: Iterable[PriceableEntity]) -> bool:
    return any(entity.is_priced for entity in entities)


def approval_complete(entities: Iterable[PriceableEntity]) -> bool:
    """True once every priced entity is approved or rejected (vacuous when none are)."""
    return all(entity.is_decided for entity in entities if entity.is_priced)


def can_advance(step: WorkflowStep, entities: Iterable[PriceableEntity]) -> bool:
    if step is WorkflowStep.SUMMARY:
        return False
    if step is WorkflowStep.APPROVAL:
        return approval_complete(entities)
    return True


def next_step(step: WorkflowStep, entities: Iterable[PriceableEntity]) -> WorkflowStep:
    """Forward transition; returns ``step`` unchanged when the move is blocked."""
    entities = tuple(entities)
    if step is WorkflowStep.SELECTION:
        return WorkflowStep.CONFIGURATION if has_priced(entities) else WorkflowStep.APPROVAL
    if step is WorkflowStep.CONFIGURATION:
        return WorkflowStep.APPROVAL
    if step is WorkflowStep.APPROVAL and approval_complete(entities):
        return WorkflowStep.SUMMARY
    return step


def previous_step(step: WorkflowStep, entities: Iterable[PriceableEntity]) -> WorkflowStep:
    if step is WorkflowStep.SUMMARY:
        return WorkflowStep.APPROVAL
    if step is WorkflowStep.APPROVAL:
        return WorkflowStep.CONFIGURATION if has_priced(entities) else WorkflowStep.SELECTION
    return WorkflowStep.SELECTION


def visible_entities(step: WorkflowStep, entities: Iterable[PriceableEntity]) -> Tuple[PriceableEntity, ...]:
    if step in (WorkflowStep.CONFIGURATION, WorkflowStep.APPROVAL):
        return tuple(entity for entity in entities if entity.is_priced)
    return tuple(entities)


def allowed_actions(step: WorkflowStep) -> FrozenSet[str]:
    return ACTIONS_BY_STEP[step]


@dataclass(frozen=True)
class WorkflowSession:
    """Snapshot of a session: the step cursor plus its entity collection."""

    step: WorkflowStep
    entities: Tuple[PriceableEntity, ...]

    @property
    def visible(self) -> Tuple[PriceableEntity, ...]:
        return visible_entities(self.step, self.entities)

    @property
    def can_advance(self) -> bool:
        return can_advance(self.step, self.entities)

    @property
    def can_go_back(self) -> bool:
        return self.step is not WorkflowStep.SELECTION

    def advance(self) -> "WorkflowSession":
        return WorkflowSession(next_step(self.step, self.entities), self.entities)

    def back(self) -> "WorkflowSession":
        return WorkflowSession(previous_step(self.step, self.entities), self.entities)


__all__ = [
    "ACTIONS_BY_STEP",
    "WorkflowSession",
    "allowed_actions",
    "approval_complete",
    "can_advance",
    "has_priced",
    "next_step",
    "previous_step",
    "visible_entities",
]
