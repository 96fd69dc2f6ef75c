from __future__ import annotations

import asyncio

import pytest

from pricingflow.config import WorkflowConfig
from pricingflow.exceptions import (
    SaveFailedError,
    SaveInProgressError,
    StepActionError,
    WorkflowClosedError,
)
from pricingflow.models import DecisionStatus, WorkflowStep
from pricingflow.workflow import PricingWorkflow


def test_open_seeds_pending_entities(workflow, two_entities, recording_save) -> None:
    workflow.open(two_entities, recording_save)

    assert workflow.is_open
    assert workflow.step is WorkflowStep.SELECTION
    assert all(entity.decision_status == DecisionStatus.PENDING for entity in workflow.entities)
    assert [entity.proposed_price for entity in workflow.entities] == [10.0, 20.0]


@pytest.mark.asyncio
async def test_end_to_end_skip_price_approve(workflow, two_entities, recording_save, saved) -> None:
    closed = []
    workflow.open(two_entities, recording_save, on_close=lambda: closed.append(True))

    workflow.mark_skipped("a")
    assert workflow.advance()
    assert workflow.step is WorkflowStep.CONFIGURATION
    assert [entity.id for entity in workflow.visible_entities] == ["b"]
    workflow.set_price("b", 25)
    assert workflow.advance()
    workflow.approve("b")
    assert workflow.advance()
    assert workflow.step is WorkflowStep.SUMMARY

    result = await workflow.confirm()

    assert result is not None
    final = saved[0]
    assert [(e.id, e.proposed_price, e.decision_status) for e in final] == [
        ("a", 10.0, DecisionStatus.SKIPPED),
        ("b", 25.0, DecisionStatus.APPROVED),
    ]
    assert result.approved_count == 1
    assert result.skipped_count == 1
    assert result.reverted_count == 1
    assert closed == [True]
    assert not workflow.is_open


@pytest.mark.asyncio
async def test_skip_after_price_edit_reverts_to_base(workflow, two_entities, recording_save, saved) -> None:
    workflow.open(two_entities, recording_save)
    workflow.advance()
    workflow.set_price("a", 77.0)
    workflow.back()
    workflow.mark_skipped("a")
    workflow.advance()
    workflow.advance()
    workflow.approve("b")
    workflow.advance()

    await workflow.confirm()
    assert saved[0][0].proposed_price == 10.0


@pytest.mark.asyncio
async def test_approved_edit_is_preserved(workflow, entity_factory, recording_save, saved) -> None:
    workflow.open([entity_factory("x", 30.0)], recording_save)
    workflow.advance()
    workflow.set_price("x", 42.50)
    workflow.advance()
    workflow.approve("x")
    workflow.approve("x")
    assert workflow.entities[0].decision_status == DecisionStatus.APPROVED
    workflow.advance()

    await workflow.confirm()
    assert saved[0][0].proposed_price == 42.50


def test_all_skipped_jumps_through_steps(workflow, entity_factory, recording_save) -> None:
    workflow.open([entity_factory(i, 1.0) for i in ("a", "b", "c")], recording_save)
    for entity_id in ("a", "b", "c"):
        workflow.mark_skipped(entity_id)

    workflow.advance()
    assert workflow.step is WorkflowStep.APPROVAL
    workflow.advance()
    assert workflow.step is WorkflowStep.SUMMARY
    workflow.back()
    workflow.back()
    assert workflow.step is WorkflowStep.SELECTION


def test_approval_guard_blocks_advance(workflow, two_entities, recording_save) -> None:
    workflow.open(two_entities, recording_save)
    workflow.advance()
    workflow.advance()
    assert workflow.step is WorkflowStep.APPROVAL

    assert not workflow.can_advance
    assert workflow.advance() is False
    assert workflow.undecided_ids() == ["a", "b"]

    workflow.approve("a")
    assert workflow.advance() is False
    workflow.reject("b")
    assert workflow.advance() is True
    assert workflow.step is WorkflowStep.SUMMARY


@pytest.mark.asyncio
async def test_empty_workflow_can_be_confirmed(workflow, recording_save, saved) -> None:
    workflow.open([], recording_save)
    workflow.advance()
    workflow.advance()
    assert workflow.step is WorkflowStep.SUMMARY

    result = await workflow.confirm()
    assert result is not None
    assert saved == [[]]


def test_close_discards_session(workflow, entity_factory, recording_save, saved) -> None:
    original = [entity_factory("a", 10.0)]
    workflow.open(original, recording_save)
    workflow.advance()
    workflow.set_price("a", 99)
    workflow.close()

    assert not workflow.is_open
    assert saved == []
    assert original[0].base_price == 10.0
    assert original[0].proposed_price is None
    with pytest.raises(WorkflowClosedError):
        workflow.advance()


def test_reopen_resets_to_selection(workflow, two_entities, recording_save) -> None:
    workflow.open(two_entities, recording_save)
    workflow.mark_skipped("a")
    workflow.advance()
    workflow.close()

    workflow.open(two_entities, recording_save)
    assert workflow.step is WorkflowStep.SELECTION
    assert workflow.entities[0].decision_status == DecisionStatus.PENDING


def test_actions_are_step_checked(workflow, two_entities, recording_save) -> None:
    workflow.open(two_entities, recording_save)
    with pytest.raises(StepActionError):
        workflow.approve("a")
    with pytest.raises(StepActionError):
        workflow.set_price("a", 5)

    workflow.mark_skipped("a")
    workflow.advance()
    with pytest.raises(StepActionError):
        workflow.set_price("a", 5)
    with pytest.raises(StepActionError):
        workflow.mark_skipped("b")


def test_unknown_entity_is_ignored(workflow, two_entities, recording_save) -> None:
    workflow.open(two_entities, recording_save)
    before = workflow.entities
    workflow.mark_skipped("missing")
    assert workflow.entities == before


@pytest.mark.asyncio
async def test_confirm_requires_summary(workflow, two_entities, recording_save) -> None:
    workflow.open(two_entities, recording_save)
    with pytest.raises(StepActionError):
        await workflow.confirm()


@pytest.mark.asyncio
async def test_invalid_price_uses_configured_fallback(entity_factory, recording_save, saved) -> None:
    workflow = PricingWorkflow(WorkflowConfig(invalid_price_fallback="previous"))
    workflow.open([entity_factory("a", 10.0)], recording_save)
    workflow.advance()
    workflow.set_price("a", "12")
    workflow.set_price("a", "twelve")
    assert workflow.entities[0].proposed_price == 12.0


async def _reach_summary(workflow: PricingWorkflow) -> None:
    workflow.advance()
    workflow.advance()
    for entity in workflow.visible_entities:
        workflow.approve(entity.id)
    workflow.advance()


@pytest.mark.asyncio
async def test_save_failure_keeps_session_for_retry(config, two_entities) -> None:
    errors = []
    calls = {"count": 0}
    saved = []

    async def flaky_save(final_entities):
        calls["count"] += 1
        if calls["count"] == 1:
            raise ConnectionError("network down")
        saved.append(final_entities)

    workflow = PricingWorkflow(config, on_error=errors.append)
    workflow.open(two_entities, flaky_save)
    await _reach_summary(workflow)

    assert await workflow.confirm() is None
    assert isinstance(errors[0], SaveFailedError)
    assert workflow.is_open
    assert workflow.step is WorkflowStep.SUMMARY
    assert all(entity.decision_status == DecisionStatus.APPROVED for entity in workflow.entities)

    result = await workflow.confirm()
    assert result is not None
    assert len(saved) == 1
    assert not workflow.is_open


@pytest.mark.asyncio
async def test_save_failure_raises_without_error_channel(workflow, two_entities) -> None:
    async def failing_save(final_entities):
        raise ConnectionError("network down")

    workflow.open(two_entities, failing_save)
    await _reach_summary(workflow)

    with pytest.raises(SaveFailedError):
        await workflow.confirm()
    assert workflow.is_open


@pytest.mark.asyncio
async def test_actions_refused_while_saving(workflow, two_entities) -> None:
    release = asyncio.Event()

    async def slow_save(final_entities):
        await release.wait()

    workflow.open(two_entities, slow_save)
    await _reach_summary(workflow)

    pending = asyncio.ensure_future(workflow.confirm())
    await asyncio.sleep(0)
    assert workflow.is_saving

    with pytest.raises(SaveInProgressError):
        await workflow.confirm()
    with pytest.raises(SaveInProgressError):
        workflow.back()
    with pytest.raises(SaveInProgressError):
        workflow.close()

    release.set()
    assert (await pending) is not None


def test_sessions_are_isolated(config, two_entities, recording_save) -> None:
    first = PricingWorkflow(config)
    second = PricingWorkflow(config)
    first.open(two_entities, recording_save)
    second.open(two_entities, recording_save)

    first.mark_skipped("a")
    assert second.entities[0].decision_status == DecisionStatus.PENDING
    assert first.session.step is WorkflowStep.SELECTION
