# This project was developed with assistance from AI tools.
"""Condition routes: status changes, deletion, overdue report."""

from db import get_db
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.condition import (
    ConditionItem,
    ConditionStatusResponse,
    ConditionStatusUpdate,
    OverdueConditionsResponse,
    OverdueLeadConditions,
)
from ..services import condition as condition_service
from ..services.clock import today
from ._deps import CurrentClock, Store, load_condition

router = APIRouter()


@router.get("/overdue", response_model=OverdueConditionsResponse)
async def list_overdue(
    clock: CurrentClock,
    session: AsyncSession = Depends(get_db),
) -> OverdueConditionsResponse:
    """Conditions still added or requested past their due date, grouped by lead."""
    as_of = today(clock)
    rows = await condition_service.list_overdue_conditions(session, as_of)
    grouped = condition_service.find_overdue_conditions(
        [ConditionItem.model_validate(row) for row in rows], as_of,
    )
    return OverdueConditionsResponse(
        as_of=as_of,
        data=[
            OverdueLeadConditions(lead_id=lead_id, conditions=items)
            for lead_id, items in grouped.items()
        ],
    )


@router.patch("/{condition_id}/status", response_model=ConditionStatusResponse)
async def update_condition_status(
    condition_id: int,
    body: ConditionStatusUpdate,
    store: Store,
    clock: CurrentClock,
    session: AsyncSession = Depends(get_db),
) -> ConditionStatusResponse:
    """Change a condition's status.

    Returns 409 when a document status is requested for a condition that
    has no document on file.
    """
    condition = await load_condition(session, condition_id)
    result = await condition_service.set_condition_status(
        store, condition, body.status, actor=body.changed_by, clock=clock,
    )
    return ConditionStatusResponse(
        condition_id=result.condition_id,
        previous_status=result.previous_status,
        status=result.status,
        history_recorded=result.history_recorded,
    )


@router.delete("/{condition_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_condition(condition_id: int, store: Store) -> Response:
    deleted = await condition_service.delete_condition(store, condition_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Condition not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
