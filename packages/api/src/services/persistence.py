# This project was developed with assistance from AI tools.
"""Lead store: the single write path for lead and condition mutations.

Every mutation is one batched UPDATE (plus any history row) committed in a
single transaction, so readers never observe a lead mid-transition. Failures
surface as ``PersistenceError``; a timeout surfaces as
``PersistenceTimeoutError`` and means the outcome is unknown, not that the
write did not happen.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from db import ConditionStatusHistory, Lead, LeadCondition, StageHistory
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """The store rejected or failed a write. No field should be assumed changed."""


class PersistenceTimeoutError(PersistenceError):
    """The write did not complete in time. Its outcome is unknown."""


@dataclass(frozen=True)
class StageHistoryEntry:
    from_stage: str | None
    to_stage: str
    changed_by: str | None
    changed_at: datetime


@dataclass(frozen=True)
class ConditionHistoryEntry:
    old_status: str | None
    new_status: str
    changed_by: str | None
    changed_at: datetime


class LeadStore(Protocol):
    """Write contract the pipeline engine depends on."""

    async def apply_lead_mutation(
        self,
        lead_id: int,
        fields: dict,
        *,
        stage_history: StageHistoryEntry | None = None,
        new_leads: list[dict] | None = None,
    ) -> list[int]: ...

    async def apply_condition_mutation(
        self,
        condition_id: int,
        fields: dict,
        *,
        history: ConditionHistoryEntry | None = None,
    ) -> None: ...

    async def append_condition_history(
        self, condition_id: int, entry: ConditionHistoryEntry,
    ) -> None: ...

    async def create_conditions(self, lead_id: int, rows: list[dict]) -> list[int]: ...

    async def delete_condition(self, condition_id: int) -> bool: ...


class SqlLeadStore:
    """``LeadStore`` backed by an async SQLAlchemy session.

    Args:
        session: Request-scoped session. The store commits on success and
            rolls back on failure.
        timeout: Seconds allowed for each write, None for no limit.
    """

    def __init__(self, session: AsyncSession, timeout: float | None = None):
        self.session = session
        self.timeout = timeout

    async def _commit(self, operation: str) -> None:
        try:
            if self.timeout is None:
                await self.session.commit()
            else:
                await asyncio.wait_for(self.session.commit(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Store %s timed out after %ss; outcome unknown", operation, self.timeout)
            raise PersistenceTimeoutError(f"{operation} timed out") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Store %s failed: %s", operation, exc)
            raise PersistenceError(f"{operation} failed") from exc

    async def _execute(self, operation: str, statement) -> object:
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Store %s failed: %s", operation, exc)
            raise PersistenceError(f"{operation} failed") from exc

    async def apply_lead_mutation(
        self,
        lead_id: int,
        fields: dict,
        *,
        stage_history: StageHistoryEntry | None = None,
        new_leads: list[dict] | None = None,
    ) -> list[int]:
        """Update one lead, optionally recording a stage change and inserting
        new leads, all in one transaction. Returns the ids of inserted leads.
        """
        if fields:
            await self._execute(
                "lead update",
                update(Lead).where(Lead.id == lead_id).values(**fields),
            )
        if stage_history is not None:
            await self._execute(
                "stage history insert",
                insert(StageHistory).values(
                    lead_id=lead_id,
                    from_stage=stage_history.from_stage,
                    to_stage=stage_history.to_stage,
                    changed_by=stage_history.changed_by,
                    changed_at=stage_history.changed_at,
                ),
            )
        created: list[int] = []
        if new_leads:
            result = await self._execute(
                "lead insert", insert(Lead).values(new_leads).returning(Lead.id),
            )
            created = list(result.scalars().all())
        await self._commit("lead update")
        return created

    async def apply_condition_mutation(
        self,
        condition_id: int,
        fields: dict,
        *,
        history: ConditionHistoryEntry | None = None,
    ) -> None:
        await self._execute(
            "condition update",
            update(LeadCondition).where(LeadCondition.id == condition_id).values(**fields),
        )
        if history is not None:
            await self._execute("condition history insert", _history_insert(condition_id, history))
        await self._commit("condition update")

    async def append_condition_history(
        self, condition_id: int, entry: ConditionHistoryEntry,
    ) -> None:
        await self._execute("condition history insert", _history_insert(condition_id, entry))
        await self._commit("condition history insert")

    async def create_conditions(self, lead_id: int, rows: list[dict]) -> list[int]:
        if not rows:
            return []
        result = await self._execute(
            "condition import",
            insert(LeadCondition)
            .values([{**row, "lead_id": lead_id} for row in rows])
            .returning(LeadCondition.id),
        )
        ids = list(result.scalars().all())
        await self._commit("condition import")
        return ids

    async def delete_condition(self, condition_id: int) -> bool:
        result = await self._execute(
            "condition delete",
            delete(LeadCondition).where(LeadCondition.id == condition_id),
        )
        await self._commit("condition delete")
        return bool(result.rowcount)


def _history_insert(condition_id: int, entry: ConditionHistoryEntry):
    return insert(ConditionStatusHistory).values(
        condition_id=condition_id,
        old_status=entry.old_status,
        new_status=entry.new_status,
        changed_by=entry.changed_by,
        changed_at=entry.changed_at,
    )


async def get_lead(session: AsyncSession, lead_id: int) -> Lead | None:
    """Load a lead row by id, or None."""
    result = await session.execute(select(Lead).where(Lead.id == lead_id))
    return result.scalar_one_or_none()


async def get_condition(session: AsyncSession, condition_id: int) -> LeadCondition | None:
    """Load a condition row by id, or None."""
    result = await session.execute(
        select(LeadCondition).where(LeadCondition.id == condition_id),
    )
    return result.scalar_one_or_none()


async def list_conditions(session: AsyncSession, lead_id: int) -> list[LeadCondition]:
    """Conditions for a lead in creation order."""
    result = await session.execute(
        select(LeadCondition)
        .where(LeadCondition.lead_id == lead_id)
        .order_by(LeadCondition.created_at, LeadCondition.id),
    )
    return list(result.scalars().all())
