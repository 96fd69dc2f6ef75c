"""Scripted decisions for driving a workflow session non-interactively.

A decision script is a YAML or JSON mapping::

    skip: [item-1]
    prices: {item-2: 25.0}
    approve: [item-2]
    reject: []
    default: reject   # optional, applied to priced entities left undecided

``run_script`` walks the session through every step exactly as a user would,
so the step guards apply unchanged.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .models import WorkflowStep
from .workflow import PricingWorkflow

LOGGER = logging.getLogger(__name__)

DEFAULT_DECISIONS = ("approve", "reject")


@dataclass
class DecisionScript:
    skip: List[str] = field(default_factory=list)
    prices: Dict[str, object] = field(default_factory=dict)
    approve: List[str] = field(default_factory=list)
    reject: List[str] = field(default_factory=list)
    default: Optional[str] = None

    def __post_init__(self) -> None:
        if self.default is not None and self.default not in DEFAULT_DECISIONS:
            raise ValueError(f"default decision must be one of {DEFAULT_DECISIONS}, got {self.default!r}")
        overlap = set(self.approve) & set(self.reject)
        if overlap:
            raise ValueError(f"Entities both approved and rejected: {', '.join(sorted(overlap))}")

    @classmethod
    def load(cls, path: Path) -> "DecisionScript":
        if not path.exists():
            raise FileNotFoundError(f"Decision script not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                raw = yaml.safe_load(f)
            else:
                raw = json.load(f)
        return cls.from_dict(raw or {})

    @classmethod
    def from_dict(cls, raw: dict) -> "DecisionScript":
        return cls(
            skip=[str(entity_id) for entity_id in raw.get("skip") or []],
            prices={str(entity_id): value for entity_id, value in (raw.get("prices") or {}).items()},
            approve=[str(entity_id) for entity_id in raw.get("approve") or []],
            reject=[str(entity_id) for entity_id in raw.get("reject") or []],
            default=raw.get("default"),
        )


def run_script(workflow: PricingWorkflow, script: DecisionScript) -> bool:
    """Apply ``script`` to an open workflow; True when it reaches the summary step."""
    for entity_id in script.skip:
        workflow.mark_skipped(entity_id)
    workflow.advance()

    if workflow.step is WorkflowStep.CONFIGURATION:
        visible = {entity.id for entity in workflow.visible_entities}
        for entity_id, value in script.prices.items():
            if entity_id not in visible:
                LOGGER.warning("Ignoring price for %s; it is not selected for pricing", entity_id)
                continue
            workflow.set_price(entity_id, value)
        workflow.advance()

    for entity_id in script.approve:
        workflow.approve(entity_id)
    for entity_id in script.reject:
        workflow.reject(entity_id)
    if script.default:
        for entity_id in workflow.undecided_ids():
            if script.default == "approve":
                workflow.approve(entity_id)
            else:
                workflow.reject(entity_id)

    return workflow.advance()


__all__ = ["DecisionScript", "run_script"]
