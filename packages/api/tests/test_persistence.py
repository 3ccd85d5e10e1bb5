# This project was developed with assistance from AI tools.
"""Tests for the SQLAlchemy-backed lead store."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.services.persistence import (
    ConditionHistoryEntry,
    PersistenceError,
    PersistenceTimeoutError,
    SqlLeadStore,
    StageHistoryEntry,
    get_lead,
)
from tests.factories import NOW


def _session(execute_result=None):
    session = AsyncMock()
    session.execute = AsyncMock(return_value=execute_result or MagicMock())
    return session


@pytest.mark.asyncio
async def test_lead_mutation_and_history_share_one_commit():
    session = _session()
    store = SqlLeadStore(session)
    entry = StageHistoryEntry("leads", "screening", "lo-jane", NOW)

    created = await store.apply_lead_mutation(101, {"stage": "screening"}, stage_history=entry)

    assert created == []
    assert session.execute.await_count == 2
    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_new_leads_inserted_in_same_transaction():
    result = MagicMock()
    result.scalars.return_value.all.return_value = [500]
    session = _session(result)
    store = SqlLeadStore(session)

    created = await store.apply_lead_mutation(
        101, {"loan_status": "New Lead"}, new_leads=[{"stage": "leads"}],
    )

    assert created == [500]
    assert session.execute.await_count == 2
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_execute_error_rolls_back_and_raises():
    session = _session()
    session.execute.side_effect = OperationalError("UPDATE leads", {}, Exception("down"))
    store = SqlLeadStore(session)

    with pytest.raises(PersistenceError):
        await store.apply_lead_mutation(101, {"stage": "screening"})

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_commit_timeout_is_unknown_outcome():
    session = _session()

    async def slow_commit():
        await asyncio.sleep(1)

    session.commit = slow_commit
    store = SqlLeadStore(session, timeout=0.01)

    with pytest.raises(PersistenceTimeoutError):
        await store.apply_lead_mutation(101, {"stage": "screening"})


@pytest.mark.asyncio
async def test_condition_mutation_with_history():
    session = _session()
    store = SqlLeadStore(session)
    entry = ConditionHistoryEntry("2_requested", "4_collected", None, NOW)

    await store.apply_condition_mutation(7, {"status": "4_collected"}, history=entry)

    assert session.execute.await_count == 2
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_conditions_empty_batch_skips_db():
    session = _session()
    store = SqlLeadStore(session)

    assert await store.create_conditions(101, []) == []
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_condition_reports_missing_row():
    result = MagicMock()
    result.rowcount = 0
    store = SqlLeadStore(_session(result))

    assert await store.delete_condition(7) is False


@pytest.mark.asyncio
async def test_get_lead_returns_row():
    row = MagicMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    session = _session(result)

    assert await get_lead(session, 101) is row
