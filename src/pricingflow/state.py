"""In-session entity state for a pricing workflow."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Tuple

from .models import DecisionStatus, PriceableEntity

LOGGER = logging.getLogger(__name__)

Entities = Tuple[PriceableEntity, ...]


@dataclass
class EntityPriceState:
    """Authoritative copy of the entities priced during one session."""

    entities: Entities = field(default_factory=tuple)

    def initialize(self, entities: Iterable[PriceableEntity]) -> Entities:
        seeded = []
        seen = set()
        for entity in entities:
            if entity.id in seen:
                raise ValueError(f"Duplicate entity id in pricing workflow: {entity.id}")
            seen.add(entity.id)
            seeded.append(
                entity.evolve(
                    decision_status=DecisionStatus.PENDING,
                    # a zero override is treated as "no override"
                    proposed_price=entity.proposed_price or entity.base_price,
                )
            )
        self.entities = tuple(seeded)
        LOGGER.debug("Initialized pricing state with %d entities", len(self.entities))
        return self.entities

    def get(self, entity_id: str) -> Optional[PriceableEntity]:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    def update(self, entity_id: str, **patch) -> Entities:
        if self.get(entity_id) is None:
            LOGGER.debug("Ignoring update for unknown entity %s", entity_id)
            return self.entities
        self.entities = tuple(
            entity.evolve(**patch) if entity.id == entity_id else entity for entity in self.entities
        )
        return self.entities

    def apply(self, reducer: Callable[..., Entities], *args) -> Entities:
        """Replace the collection with ``reducer(entities, *args)``."""
        self.entities = tuple(reducer(self.entities, *args))
        return self.entities

    def counts(self) -> Dict[DecisionStatus, int]:
        totals = {status: 0 for status in DecisionStatus}
        for entity in self.entities:
            totals[entity.decision_status] += 1
        return totals

    def __len__(self) -> int:
        return len(self.entities)


__all__ = ["EntityPriceState", "Entities"]
