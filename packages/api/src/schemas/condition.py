# This project was developed with assistance from AI tools.
"""Schemas for condition endpoints."""

from datetime import date, datetime

from db.enums import ConditionPriority, ConditionStatus
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class ConditionSnapshot(BaseModel):
    """Point-in-time view of a condition consumed by the workflow."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: int
    description: str
    status: ConditionStatus = ConditionStatus.ADDED
    document_id: str | None = None
    due_date: date | None = None
    priority: ConditionPriority | None = None
    needed_from: str | None = None
    notes: str | None = None


class ConditionItem(ConditionSnapshot):
    """Single condition in a list response."""

    created_at: datetime | None = None
    updated_at: datetime | None = None


class ConditionListResponse(BaseModel):
    """Response for GET /leads/{id}/conditions."""

    data: list[ConditionItem]
    pagination: Pagination
    summary: "ConditionSummary"


class ConditionCreate(BaseModel):
    """One condition in a bulk import."""

    description: str = Field(min_length=1)
    status: ConditionStatus = ConditionStatus.ADDED
    document_id: str | None = None
    due_date: date | None = None
    priority: ConditionPriority | None = None
    needed_from: str | None = None
    notes: str | None = None


class ConditionImportRequest(BaseModel):
    """Request body for POST /leads/{id}/conditions."""

    conditions: list[ConditionCreate] = Field(min_length=1)


class ConditionImportResponse(BaseModel):
    lead_id: int
    created_ids: list[int]


class ConditionStatusUpdate(BaseModel):
    """Request body for PATCH /conditions/{id}/status."""

    status: ConditionStatus
    changed_by: str | None = None


class ConditionStatusResponse(BaseModel):
    """Outcome of a status change.

    ``previous_status`` lets a caller roll back an optimistic copy if it
    later discards the change.
    """

    condition_id: int
    previous_status: ConditionStatus
    status: ConditionStatus
    history_recorded: bool


class ConditionSummary(BaseModel):
    total: int
    by_status: dict[str, int]
    cleared: int
    outstanding: int
    satisfied: bool


class OverdueLeadConditions(BaseModel):
    lead_id: int
    conditions: list[ConditionItem]


class OverdueConditionsResponse(BaseModel):
    """Response for GET /conditions/overdue."""

    as_of: date
    data: list[OverdueLeadConditions]


ConditionListResponse.model_rebuild()
