# This project was developed with assistance from AI tools.
"""Condition workflow: status gating, history, bulk import, overdue detection.

A condition may only enter a document status (collected, sent to lender,
cleared) from an early status when a document is on file. Conditions that
have already progressed past the early statuses are not re-gated. Every
entry into a document status appends an immutable history row in the same
write as the status change.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from db import LeadCondition
from db.enums import ConditionStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.condition import ConditionCreate, ConditionSnapshot, ConditionSummary
from .clock import Clock, SystemClock
from .persistence import ConditionHistoryEntry, LeadStore

logger = logging.getLogger(__name__)

# Statuses still waiting on the borrower once the due date has passed.
OVERDUE_STATUSES = frozenset({ConditionStatus.ADDED, ConditionStatus.REQUESTED})


class DocumentRequiredError(ValueError):
    """A document status was requested for a condition with no document on file."""

    def __init__(self, condition_id: int | None, target: ConditionStatus):
        self.condition_id = condition_id
        self.target = target
        super().__init__(
            f"A document must be attached before the condition can be marked {target.label}"
        )


@dataclass
class ConditionStatusResult:
    condition_id: int
    previous_status: ConditionStatus
    status: ConditionStatus
    history_recorded: bool


def evaluate_condition_status(
    status: ConditionStatus,
    document_id: str | None,
    target: ConditionStatus,
) -> bool:
    """True when a condition at ``status`` may move to ``target``."""
    if target not in ConditionStatus.document_statuses():
        return True
    if status not in ConditionStatus.early_statuses():
        return True
    return bool(document_id)


async def set_condition_status(
    store: LeadStore,
    condition: ConditionSnapshot,
    target: ConditionStatus,
    *,
    actor: str | None = None,
    clock: Clock | None = None,
) -> ConditionStatusResult:
    """Move ``condition`` to ``target``.

    Raises:
        DocumentRequiredError: The gate refused the change. Nothing was written.
        PersistenceError: The store failed. The caller must keep the old status.
    """
    if not evaluate_condition_status(condition.status, condition.document_id, target):
        raise DocumentRequiredError(condition.id, target)

    history = None
    if target in ConditionStatus.document_statuses():
        history = ConditionHistoryEntry(
            old_status=condition.status.value,
            new_status=target.value,
            changed_by=actor,
            changed_at=(clock or SystemClock()).now(),
        )

    await store.apply_condition_mutation(condition.id, {"status": target}, history=history)
    logger.info(
        "Condition %s status %s -> %s", condition.id, condition.status.value, target.value,
    )
    return ConditionStatusResult(
        condition_id=condition.id,
        previous_status=condition.status,
        status=target,
        history_recorded=history is not None,
    )


async def delete_condition(store: LeadStore, condition_id: int) -> bool:
    """Remove a condition. Returns False when it did not exist."""
    deleted = await store.delete_condition(condition_id)
    if deleted:
        logger.info("Condition %s deleted", condition_id)
    return deleted


async def create_conditions(
    store: LeadStore,
    lead_id: int,
    items: list[ConditionCreate],
) -> list[int]:
    """Import a batch of conditions for a lead in one write.

    Imported statuses obey the same gate as a change from ``added``; the
    whole batch is refused when any item fails it.
    """
    for item in items:
        if not evaluate_condition_status(ConditionStatus.ADDED, item.document_id, item.status):
            raise DocumentRequiredError(None, item.status)

    ids = await store.create_conditions(lead_id, [item.model_dump() for item in items])
    logger.info("Imported %d conditions for lead %s", len(ids), lead_id)
    return ids


def find_overdue_conditions(
    conditions: list[ConditionSnapshot],
    today: date,
) -> dict[int, list[ConditionSnapshot]]:
    """Group conditions still added or requested after their due date by lead."""
    overdue: dict[int, list[ConditionSnapshot]] = defaultdict(list)
    for condition in conditions:
        if (
            condition.status in OVERDUE_STATUSES
            and condition.due_date is not None
            and condition.due_date < today
        ):
            overdue[condition.lead_id].append(condition)
    return dict(overdue)


async def list_overdue_conditions(session: AsyncSession, today: date) -> list[LeadCondition]:
    """Overdue condition rows across all leads, oldest due date first."""
    stmt = (
        select(LeadCondition)
        .where(
            LeadCondition.status.in_(list(OVERDUE_STATUSES)),
            LeadCondition.due_date.is_not(None),
            LeadCondition.due_date < today,
        )
        .order_by(LeadCondition.lead_id, LeadCondition.due_date)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


def conditions_satisfied(conditions: list[ConditionSnapshot]) -> bool:
    """True when every condition is cleared. A lead with no conditions is satisfied."""
    return all(c.status == ConditionStatus.CLEARED for c in conditions)


def summarize_conditions(conditions: list[ConditionSnapshot]) -> ConditionSummary:
    counts = {status.value: 0 for status in ConditionStatus}
    for condition in conditions:
        counts[condition.status.value] += 1
    cleared = counts[ConditionStatus.CLEARED.value]
    return ConditionSummary(
        total=len(conditions),
        by_status=counts,
        cleared=cleared,
        outstanding=len(conditions) - cleared,
        satisfied=conditions_satisfied(conditions),
    )
