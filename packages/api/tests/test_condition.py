# This project was developed with assistance from AI tools.
"""Tests for the condition workflow."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from db.enums import ConditionStatus

from src.schemas.condition import ConditionCreate
from src.services.clock import FixedClock
from src.services.condition import (
    DocumentRequiredError,
    conditions_satisfied,
    create_conditions,
    delete_condition,
    evaluate_condition_status,
    find_overdue_conditions,
    list_overdue_conditions,
    set_condition_status,
    summarize_conditions,
)
from src.services.persistence import PersistenceError
from tests.factories import NOW, TODAY, make_condition
from tests.fakes import InMemoryLeadStore

# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("early", list(ConditionStatus.early_statuses()))
@pytest.mark.parametrize("target", list(ConditionStatus.document_statuses()))
def test_early_condition_without_document_is_gated(early, target):
    assert evaluate_condition_status(early, None, target) is False


@pytest.mark.parametrize("target", list(ConditionStatus.document_statuses()))
def test_document_on_file_opens_gate(target):
    assert evaluate_condition_status(ConditionStatus.REQUESTED, "doc-88", target) is True


@pytest.mark.parametrize(
    "current", [ConditionStatus.COLLECTED, ConditionStatus.SENT_TO_LENDER, ConditionStatus.CLEARED],
)
def test_progressed_condition_not_regated(current):
    assert evaluate_condition_status(current, None, ConditionStatus.CLEARED) is True


def test_early_targets_never_gated():
    assert evaluate_condition_status(ConditionStatus.ADDED, None, ConditionStatus.RE_REQUESTED) is True


# ---------------------------------------------------------------------------
# set_condition_status
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_requested_without_document_cannot_be_collected():
    store = InMemoryLeadStore()
    condition = make_condition(status=ConditionStatus.REQUESTED, document_id=None)

    with pytest.raises(DocumentRequiredError) as exc_info:
        await set_condition_status(store, condition, ConditionStatus.COLLECTED)

    assert exc_info.value.condition_id == condition.id
    assert store.condition_writes == []
    assert store.condition_history == []


@pytest.mark.asyncio
async def test_requested_with_document_is_collected_with_history():
    store = InMemoryLeadStore()
    condition = make_condition(status=ConditionStatus.REQUESTED, document_id="doc-88")

    result = await set_condition_status(
        store, condition, ConditionStatus.COLLECTED, actor="lo-jane", clock=FixedClock(NOW),
    )

    assert result.previous_status == ConditionStatus.REQUESTED
    assert result.status == ConditionStatus.COLLECTED
    assert result.history_recorded is True
    assert store.condition_writes == [(7, {"status": ConditionStatus.COLLECTED})]
    (condition_id, entry), = store.condition_history
    assert condition_id == 7
    assert entry.old_status == "2_requested"
    assert entry.new_status == "4_collected"
    assert entry.changed_by == "lo-jane"
    assert entry.changed_at == NOW


@pytest.mark.asyncio
async def test_collected_moves_on_after_document_cleared():
    store = InMemoryLeadStore()
    condition = make_condition(status=ConditionStatus.COLLECTED, document_id=None)

    result = await set_condition_status(store, condition, ConditionStatus.SENT_TO_LENDER)

    assert result.status == ConditionStatus.SENT_TO_LENDER
    assert len(store.condition_history) == 1


@pytest.mark.asyncio
async def test_early_status_change_has_no_history():
    store = InMemoryLeadStore()
    condition = make_condition(status=ConditionStatus.ADDED)

    result = await set_condition_status(store, condition, ConditionStatus.REQUESTED)

    assert result.history_recorded is False
    assert store.condition_writes == [(7, {"status": ConditionStatus.REQUESTED})]
    assert store.condition_history == []


@pytest.mark.asyncio
async def test_reopened_condition_is_gated_again():
    store = InMemoryLeadStore()
    condition = make_condition(status=ConditionStatus.CLEARED, document_id=None)
    await set_condition_status(store, condition, ConditionStatus.REQUESTED)

    reopened = condition.model_copy(update={"status": ConditionStatus.REQUESTED})
    with pytest.raises(DocumentRequiredError):
        await set_condition_status(store, reopened, ConditionStatus.CLEARED)


@pytest.mark.asyncio
async def test_store_failure_propagates():
    store = InMemoryLeadStore()
    store.fail_with = PersistenceError("condition update failed")
    condition = make_condition(status=ConditionStatus.REQUESTED, document_id="doc-88")

    with pytest.raises(PersistenceError):
        await set_condition_status(store, condition, ConditionStatus.COLLECTED)


# ---------------------------------------------------------------------------
# Delete / import
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_is_unconditional():
    store = InMemoryLeadStore()
    store.existing_conditions.add(7)
    assert await delete_condition(store, 7) is True
    assert await delete_condition(store, 7) is False


@pytest.mark.asyncio
async def test_bulk_import_writes_once():
    store = InMemoryLeadStore()
    items = [
        ConditionCreate(description="Bank statements"),
        ConditionCreate(description="Gift letter", status=ConditionStatus.REQUESTED),
        ConditionCreate(description="VOE", status=ConditionStatus.COLLECTED, document_id="doc-3"),
    ]

    ids = await create_conditions(store, 101, items)

    assert ids == [900, 901, 902]
    (lead_id, rows), = store.imported
    assert lead_id == 101
    assert [r["status"] for r in rows] == [
        ConditionStatus.ADDED, ConditionStatus.REQUESTED, ConditionStatus.COLLECTED,
    ]


@pytest.mark.asyncio
async def test_bulk_import_refused_when_any_item_gated():
    store = InMemoryLeadStore()
    items = [
        ConditionCreate(description="Bank statements"),
        ConditionCreate(description="Appraisal", status=ConditionStatus.CLEARED),
    ]

    with pytest.raises(DocumentRequiredError):
        await create_conditions(store, 101, items)
    assert store.imported == []


# ---------------------------------------------------------------------------
# Overdue / summary
# ---------------------------------------------------------------------------


def test_find_overdue_groups_by_lead():
    yesterday = TODAY - timedelta(days=1)
    conditions = [
        make_condition(id=1, lead_id=101, status=ConditionStatus.ADDED, due_date=yesterday),
        make_condition(id=2, lead_id=101, status=ConditionStatus.REQUESTED, due_date=date(2026, 2, 1)),
        make_condition(id=3, lead_id=202, status=ConditionStatus.REQUESTED, due_date=yesterday),
        make_condition(id=4, lead_id=202, status=ConditionStatus.RE_REQUESTED, due_date=yesterday),
        make_condition(id=5, lead_id=303, status=ConditionStatus.ADDED, due_date=TODAY),
        make_condition(id=6, lead_id=303, status=ConditionStatus.ADDED, due_date=None),
        make_condition(id=8, lead_id=404, status=ConditionStatus.COLLECTED, due_date=yesterday),
    ]

    overdue = find_overdue_conditions(conditions, TODAY)

    assert {lead: [c.id for c in items] for lead, items in overdue.items()} == {
        101: [1, 2],
        202: [3],
    }


@pytest.mark.asyncio
async def test_list_overdue_conditions_queries_session():
    rows = [MagicMock(), MagicMock()]
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)

    assert await list_overdue_conditions(session, TODAY) == rows
    session.execute.assert_awaited_once()


def test_summary_counts_by_status():
    conditions = [
        make_condition(id=1, status=ConditionStatus.CLEARED),
        make_condition(id=2, status=ConditionStatus.CLEARED),
        make_condition(id=3, status=ConditionStatus.SENT_TO_LENDER),
    ]
    summary = summarize_conditions(conditions)
    assert summary.total == 3
    assert summary.cleared == 2
    assert summary.outstanding == 1
    assert summary.by_status["6_cleared"] == 2
    assert summary.by_status["1_added"] == 0
    assert summary.satisfied is False


def test_satisfied_when_all_cleared():
    assert conditions_satisfied([make_condition(status=ConditionStatus.CLEARED)]) is True
    assert conditions_satisfied([]) is True
