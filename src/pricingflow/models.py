from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def timestamp(moment: datetime | None = None) -> str:
    ts = moment or datetime.now().astimezone()
    return ts.strftime(ISO_FORMAT)


class DecisionStatus(str, Enum):
    """Pricing decision attached to an entity during a workflow session."""

    PENDING = "pending"
    SKIPPED = "skipped"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkflowStep(str, Enum):
    """Cursor positions of the pricing workflow, in forward order."""

    SELECTION = "selection"
    CONFIGURATION = "configuration"
    APPROVAL = "approval"
    SUMMARY = "summary"


DECIDED_STATUSES = frozenset({DecisionStatus.APPROVED, DecisionStatus.REJECTED})
REVERTING_STATUSES = frozenset({DecisionStatus.SKIPPED, DecisionStatus.REJECTED})


@dataclass(frozen=True)
class PriceableEntity:
    """Canonical view of a cart item or proofing asset going through pricing."""

    id: str
    label: str
    base_price: float
    proposed_price: Optional[float] = None
    decision_status: DecisionStatus = DecisionStatus.PENDING

    @property
    def is_priced(self) -> bool:
        return self.decision_status != DecisionStatus.SKIPPED

    @property
    def is_decided(self) -> bool:
        return self.decision_status in DECIDED_STATUSES

    @property
    def effective_price(self) -> float:
        return self.base_price if self.proposed_price is None else self.proposed_price

    def evolve(self, **changes) -> "PriceableEntity":
        return replace(self, **changes)


__all__ = [
    "DecisionStatus",
    "WorkflowStep",
    "PriceableEntity",
    "DECIDED_STATUSES",
    "REVERTING_STATUSES",
    "ISO_FORMAT",
    "timestamp",
]
