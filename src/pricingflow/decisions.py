"""Pure decision reducers over an entity collection.

Every function takes the full collection and returns a new tuple; entities
are never mutated in place.  Unknown ids leave the collection unchanged.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Tuple

from .models import DecisionStatus, PriceableEntity

LOGGER = logging.getLogger(__name__)

Entities = Tuple[PriceableEntity, ...]


def _update(entities: Iterable[PriceableEntity], entity_id: str, **changes) -> Entities:
    return tuple(entity.evolve(**changes) if entity.id == entity_id else entity for entity in entities)


def mark_for_pricing(entities: Iterable[PriceableEntity], entity_id: str) -> Entities:
    return _update(entities, entity_id, decision_status=DecisionStatus.PENDING)


def mark_skipped(entities: Iterable[PriceableEntity], entity_id: str) -> Entities:
    return _update(entities, entity_id, decision_status=DecisionStatus.SKIPPED)


def select(entities: Iterable[PriceableEntity], entity_id: str, should_price: bool) -> Entities:
    if should_price:
        return mark_for_pricing(entities, entity_id)
    return mark_skipped(entities, entity_id)


def parse_price(value: object) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return None
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def set_proposed_price(
    entities: Iterable[PriceableEntity],
    entity_id: str,
    value: object,
    fallback: str = "base",
) -> Entities:
    """Set the proposed price, coercing invalid input instead of rejecting it.

    ``fallback`` selects the replacement for unparseable/NaN input: ``"base"``
    uses the entity's base price, ``"previous"`` keeps the prior proposal.
    """
    updated = []
    for entity in entities:
        if entity.id != entity_id:
            updated.append(entity)
            continue
        price = parse_price(value)
        if price is None:
            price = entity.effective_price if fallback == "previous" else entity.base_price
            LOGGER.debug("Coerced invalid price %r for %s to %.2f", value, entity_id, price)
        updated.append(entity.evolve(proposed_price=price))
    return tuple(updated)


def decide(entities: Iterable[PriceableEntity], entity_id: str, status: DecisionStatus) -> Entities:
    if status not in (DecisionStatus.APPROVED, DecisionStatus.REJECTED):
        raise ValueError(f"decide() expects approved or rejected, got {status.value}")
    return _update(entities, entity_id, decision_status=status)


def approve(entities: Iterable[PriceableEntity], entity_id: str) -> Entities:
    return decide(entities, entity_id, DecisionStatus.APPROVED)


def reject(entities: Iterable[PriceableEntity], entity_id: str) -> Entities:
    return decide(entities, entity_id, DecisionStatus.REJECTED)


__all__ = [
    "mark_for_pricing",
    "mark_skipped",
    "select",
    "parse_price",
    "set_proposed_price",
    "decide",
    "approve",
    "reject",
]
