# This project was developed with assistance from AI tools.
"""Shared route dependencies: store, clock, notification hook, snapshot loaders."""

from typing import Annotated

from db import get_db
from db.enums import PipelineStage
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.condition import ConditionSnapshot
from ..schemas.lead import LeadResponse, LeadSnapshot
from ..services.clock import Clock, SystemClock
from ..services.notification import LoggingNotificationHook, NotificationHook
from ..services.persistence import SqlLeadStore, get_condition, get_lead


def get_store(session: AsyncSession = Depends(get_db)) -> SqlLeadStore:
    return SqlLeadStore(session, timeout=settings.PERSISTENCE_TIMEOUT_SECONDS)


def get_clock() -> Clock:
    return SystemClock()


def get_notifier() -> NotificationHook:
    return LoggingNotificationHook()


Store = Annotated[SqlLeadStore, Depends(get_store)]
CurrentClock = Annotated[Clock, Depends(get_clock)]
Notifier = Annotated[NotificationHook, Depends(get_notifier)]


async def load_lead(session: AsyncSession, lead_id: int) -> LeadSnapshot:
    lead = await get_lead(session, lead_id)
    if lead is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead not found",
        )
    return LeadSnapshot.model_validate(lead)


async def load_condition(session: AsyncSession, condition_id: int) -> ConditionSnapshot:
    condition = await get_condition(session, condition_id)
    if condition is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Condition not found",
        )
    return ConditionSnapshot.model_validate(condition)


def build_lead_response(lead) -> LeadResponse:
    response = LeadResponse.model_validate(lead)
    stage = PipelineStage.from_key(response.stage)
    response.stage_label = stage.label if stage is not None else response.stage
    return response
