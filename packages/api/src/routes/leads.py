# This project was developed with assistance from AI tools.
"""Lead routes: read, edit, stage transitions, financials, sub-statuses, conditions."""

from db import get_db
from db.enums import ActiveSubStatus
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas import Pagination
from ..schemas.calculator import FinancialsResponse, RecalculateRequest
from ..schemas.condition import (
    ConditionImportRequest,
    ConditionImportResponse,
    ConditionItem,
    ConditionListResponse,
)
from ..schemas.lead import (
    ActiveStatusRequest,
    LeadResponse,
    LeadUpdate,
    MutationResponse,
    PastClientStatusRequest,
    StageDeficiencyResponse,
    StageTransitionRequest,
    StageValidateRequest,
    StageValidationResponse,
)
from ..services import lead as lead_service
from ..services.condition import create_conditions, summarize_conditions
from ..services.lead import MutationResult, MutationStatus
from ..services.persistence import get_lead, list_conditions
from ..services.stage_rules import StageValidation, validate_stage_transition
from ..services.transition import StageMismatchError
from ._deps import CurrentClock, Notifier, Store, build_lead_response, load_lead

router = APIRouter()

_MUTATION_STATUS_CODES = {
    MutationStatus.APPLIED: status.HTTP_200_OK,
    MutationStatus.DEFICIENT: status.HTTP_409_CONFLICT,
    MutationStatus.FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    MutationStatus.UNKNOWN: status.HTTP_504_GATEWAY_TIMEOUT,
}


def _deficiency(validation: StageValidation | None) -> StageDeficiencyResponse | None:
    if validation is None or validation.approved:
        return None
    return StageDeficiencyResponse(
        target_stage=validation.target_stage,
        message=validation.message or "",
        action_label=validation.rule.action_label if validation.rule else None,
        missing_fields=validation.missing_fields,
        bypass_available=validation.bypass_available,
    )


def _mutation_response(result: MutationResult) -> JSONResponse:
    body = MutationResponse(
        lead_id=result.lead_id,
        status=result.status.value,
        fields=jsonable_encoder(result.fields),
        deficiency=_deficiency(result.validation),
        created_lead_ids=result.created_lead_ids,
        error=result.error,
    )
    return JSONResponse(
        status_code=_MUTATION_STATUS_CODES[result.status],
        content=body.model_dump(mode="json"),
    )


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead_detail(
    lead_id: int,
    session: AsyncSession = Depends(get_db),
) -> LeadResponse:
    lead = await get_lead(session, lead_id)
    if lead is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead not found",
        )
    return build_lead_response(lead)


@router.patch("/{lead_id}", response_model=MutationResponse)
async def update_lead(
    lead_id: int,
    body: LeadUpdate,
    store: Store,
    notifier: Notifier,
    session: AsyncSession = Depends(get_db),
):
    """Apply manual edits. ``needs_review`` skips PITI auto-seeding."""
    lead = await load_lead(session, lead_id)
    changes = body.model_dump(exclude_unset=True, exclude={"needs_review", "changed_by"})
    result = await lead_service.update_lead_fields(
        store,
        lead,
        changes,
        suppress_auto_seed=body.needs_review,
        notifier=notifier,
    )
    return _mutation_response(result)


@router.post("/{lead_id}/stage/validate", response_model=StageValidationResponse)
async def validate_stage(
    lead_id: int,
    body: StageValidateRequest,
    session: AsyncSession = Depends(get_db),
) -> StageValidationResponse:
    """Dry-run the stage gate without writing anything."""
    lead = await load_lead(session, lead_id)
    validation = validate_stage_transition(lead, body.target_stage)
    return StageValidationResponse(
        approved=validation.approved,
        deficiency=_deficiency(validation),
    )


@router.post(
    "/{lead_id}/stage",
    response_model=MutationResponse,
    responses={409: {"model": MutationResponse}},
)
async def transition_stage(
    lead_id: int,
    body: StageTransitionRequest,
    store: Store,
    clock: CurrentClock,
    notifier: Notifier,
    session: AsyncSession = Depends(get_db),
):
    """Move a lead to another stage.

    Returns 409 with the deficiency when required fields are missing and the
    lead does not qualify for the stage rule's bypass.
    """
    lead = await load_lead(session, lead_id)
    corrected = body.corrected_fields.model_dump(exclude_none=True) if body.corrected_fields else None
    try:
        result = await lead_service.apply_stage_transition(
            store,
            lead,
            body.target_stage,
            bypass=body.bypass,
            corrected_fields=corrected,
            actor=body.changed_by,
            clock=clock,
            notifier=notifier,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from None
    return _mutation_response(result)


@router.post("/{lead_id}/financials/recalculate", response_model=FinancialsResponse)
async def recalculate_financials(
    lead_id: int,
    body: RecalculateRequest,
    store: Store,
    notifier: Notifier,
    session: AsyncSession = Depends(get_db),
):
    lead = await load_lead(session, lead_id)
    result = await lead_service.recalculate_financials(
        store, lead, body.changed_field, notifier=notifier,
    )
    if not result.applied:
        return _mutation_response(result)
    return FinancialsResponse(lead_id=lead_id, updated_fields=result.fields)


@router.put("/{lead_id}/active-status", response_model=MutationResponse)
async def set_active_status(
    lead_id: int,
    body: ActiveStatusRequest,
    store: Store,
    notifier: Notifier,
    session: AsyncSession = Depends(get_db),
):
    sub_status = ActiveSubStatus.from_code(body.sub_status)
    if sub_status is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown active sub-status: {body.sub_status}",
        )
    lead = await load_lead(session, lead_id)
    try:
        result = await lead_service.set_active_sub_status(
            store, lead, sub_status, notifier=notifier,
        )
    except StageMismatchError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from None
    return _mutation_response(result)


@router.put("/{lead_id}/past-client-status", response_model=MutationResponse)
async def set_past_client_status(
    lead_id: int,
    body: PastClientStatusRequest,
    store: Store,
    clock: CurrentClock,
    notifier: Notifier,
    session: AsyncSession = Depends(get_db),
):
    """Set a past client's status. ``New Lead`` also creates a new lead."""
    lead = await load_lead(session, lead_id)
    try:
        result = await lead_service.set_past_client_status(
            store, lead, body.status, clock=clock, notifier=notifier,
        )
    except StageMismatchError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from None
    return _mutation_response(result)


@router.get("/{lead_id}/conditions", response_model=ConditionListResponse)
async def list_lead_conditions(
    lead_id: int,
    session: AsyncSession = Depends(get_db),
) -> ConditionListResponse:
    """List conditions for a lead with status counts."""
    await load_lead(session, lead_id)
    rows = await list_conditions(session, lead_id)
    items = [ConditionItem.model_validate(row) for row in rows]
    return ConditionListResponse(
        data=items,
        pagination=Pagination.complete(len(items)),
        summary=summarize_conditions(items),
    )


@router.post(
    "/{lead_id}/conditions",
    response_model=ConditionImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_conditions(
    lead_id: int,
    body: ConditionImportRequest,
    store: Store,
    session: AsyncSession = Depends(get_db),
) -> ConditionImportResponse:
    """Bulk-import conditions for a lead."""
    await load_lead(session, lead_id)
    created = await create_conditions(store, lead_id, body.conditions)
    return ConditionImportResponse(lead_id=lead_id, created_ids=created)
