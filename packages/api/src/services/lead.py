# This project was developed with assistance from AI tools.
"""Lead mutation coordinator.

Runs the stage gate, plans the transition, folds in any financial
recompute, and persists everything through a single store call. The
returned ``MutationResult`` tells the caller whether the change was
applied, refused, failed, or has an unknown outcome, so an optimistic
client copy can be kept or discarded accordingly.
"""

import enum
import logging
from dataclasses import dataclass, field

from db.enums import ActiveSubStatus

from ..core.config import settings
from ..schemas.lead import LeadSnapshot
from .calculator import LOAN_INPUT_FIELDS, principal_interest_fields, seed_piti_fields
from .clock import Clock, SystemClock, today
from .notification import NotificationHook, notify_lead_changed
from .persistence import LeadStore, PersistenceError, PersistenceTimeoutError, StageHistoryEntry
from .stage_rules import (
    FIELD_STATUS_RULES,
    StageValidation,
    StatusChangeBlockedError,
    apply_corrections,
    missing_for,
    validate_stage_transition,
    validate_status_change,
)
from .transition import plan_active_sub_status, plan_past_client_status, plan_stage_transition

logger = logging.getLogger(__name__)

_STATUS_RULE_FIELDS = frozenset(name for name, _ in FIELD_STATUS_RULES)


class MutationStatus(str, enum.Enum):
    APPLIED = "applied"
    DEFICIENT = "deficient"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass
class MutationResult:
    """Outcome of a coordinated lead write.

    ``fields`` lists what was (or, for ``UNKNOWN``, may have been) written.
    """

    lead_id: int
    status: MutationStatus
    fields: dict = field(default_factory=dict)
    validation: StageValidation | None = None
    created_lead_ids: list[int] = field(default_factory=list)
    error: str | None = None

    @property
    def applied(self) -> bool:
        return self.status == MutationStatus.APPLIED


def _financial_updates(lead: LeadSnapshot, fields: dict) -> dict:
    """P&I refresh owed by a write that touches loan inputs, or {}."""
    touched = LOAN_INPUT_FIELDS & fields.keys()
    if not touched:
        return {}
    return principal_interest_fields(
        lead.with_fields(fields), sorted(touched)[0], default_term=settings.DEFAULT_TERM_MONTHS,
    )


async def _persist(
    store: LeadStore,
    lead_id: int,
    fields: dict,
    *,
    operation: str,
    stage_history: StageHistoryEntry | None = None,
    new_leads: list[dict] | None = None,
    validation: StageValidation | None = None,
    notifier: NotificationHook | None = None,
) -> MutationResult:
    try:
        created = await store.apply_lead_mutation(
            lead_id, fields, stage_history=stage_history, new_leads=new_leads,
        )
    except PersistenceTimeoutError as exc:
        logger.error("Lead %s %s outcome unknown: %s", lead_id, operation, exc)
        return MutationResult(
            lead_id=lead_id,
            status=MutationStatus.UNKNOWN,
            fields=fields,
            validation=validation,
            error=str(exc),
        )
    except PersistenceError as exc:
        logger.error("Lead %s %s failed: %s", lead_id, operation, exc)
        return MutationResult(
            lead_id=lead_id,
            status=MutationStatus.FAILED,
            validation=validation,
            error=str(exc),
        )

    logger.info("Lead %s %s applied (%s)", lead_id, operation, ", ".join(sorted(fields)))
    await notify_lead_changed(notifier, lead_id)
    return MutationResult(
        lead_id=lead_id,
        status=MutationStatus.APPLIED,
        fields=fields,
        validation=validation,
        created_lead_ids=created or [],
    )


async def apply_stage_transition(
    store: LeadStore,
    lead: LeadSnapshot,
    target_stage: str,
    *,
    bypass: bool = False,
    corrected_fields: dict | None = None,
    actor: str | None = None,
    clock: Clock | None = None,
    notifier: NotificationHook | None = None,
) -> MutationResult:
    """Validate, plan and persist a stage change in one write.

    Required fields are waived only by the stage rule's bypass predicate
    (e.g. a refinance entering Active without a contract). ``bypass`` is the
    caller's confirmation of that path; it never overrides a deficiency on a
    lead the predicate does not cover. Inline corrections are persisted with
    the transition.

    Raises:
        ValueError: ``corrected_fields`` names a field that cannot be corrected inline.
    """
    validation = validate_stage_transition(lead, target_stage, corrected_fields)
    if not validation.approved:
        if bypass:
            logger.info(
                "Lead %s: bypass into %s requested but not available", lead.id, target_stage,
            )
        return MutationResult(
            lead_id=lead.id,
            status=MutationStatus.DEFICIENT,
            validation=validation,
        )

    working = apply_corrections(lead, corrected_fields)
    now = (clock or SystemClock()).now()
    mutation = plan_stage_transition(
        working,
        target_stage,
        now,
        bypass=bool(validation.bypassed_fields),
        actor=actor,
    )
    if mutation.bypassed:
        logger.info(
            "Lead %s entering %s with bypass of %s",
            lead.id, mutation.to_stage, ", ".join(validation.bypassed_fields),
        )

    fields = {**(corrected_fields or {}), **mutation.fields}
    fields.update(_financial_updates(working, fields))

    return await _persist(
        store,
        lead.id,
        fields,
        operation=f"stage {mutation.from_stage} -> {mutation.to_stage}",
        stage_history=mutation.history,
        validation=validation,
        notifier=notifier,
    )


async def recalculate_financials(
    store: LeadStore,
    lead: LeadSnapshot,
    changed_field: str,
    *,
    notifier: NotificationHook | None = None,
) -> MutationResult:
    """Refresh P&I, PITI and DTI after ``changed_field`` changed on ``lead``.

    Nothing is written when the field is not a loan input or the loan
    amount is not positive.
    """
    fields = principal_interest_fields(
        lead, changed_field, default_term=settings.DEFAULT_TERM_MONTHS,
    )
    if not fields:
        return MutationResult(lead_id=lead.id, status=MutationStatus.APPLIED)
    return await _persist(
        store, lead.id, fields, operation="financial recalculation", notifier=notifier,
    )


async def ensure_piti_seeded(
    store: LeadStore,
    lead: LeadSnapshot,
    *,
    default_rate: float | None = None,
    notifier: NotificationHook | None = None,
) -> MutationResult:
    """Compute and store PITI once for a lead that has a loan amount but no PITI."""
    rate = default_rate if default_rate is not None else settings.DEFAULT_INTEREST_RATE
    fields = seed_piti_fields(lead, rate, default_term=settings.DEFAULT_TERM_MONTHS)
    if fields is None:
        return MutationResult(lead_id=lead.id, status=MutationStatus.APPLIED)
    return await _persist(store, lead.id, fields, operation="PITI seed", notifier=notifier)


async def update_lead_fields(
    store: LeadStore,
    lead: LeadSnapshot,
    changes: dict,
    *,
    suppress_auto_seed: bool = False,
    default_rate: float | None = None,
    notifier: NotificationHook | None = None,
) -> MutationResult:
    """Apply manual edits to a lead.

    Milestone status values are checked against the lead as it will look
    after the edit, so an attachment uploaded in the same request counts.
    Loan input edits refresh P&I; a lead without PITI is seeded unless
    ``suppress_auto_seed`` is set (values awaiting review).

    Raises:
        StatusChangeBlockedError: A milestone status lacks its supporting data.
    """
    updated = lead.with_fields(changes)
    for name in _STATUS_RULE_FIELDS & changes.keys():
        rule = validate_status_change(name, changes[name], updated)
        if rule is not None:
            raise StatusChangeBlockedError(rule, missing_for(rule, updated))

    seed = None
    if not suppress_auto_seed:
        rate = default_rate if default_rate is not None else settings.DEFAULT_INTEREST_RATE
        seed = seed_piti_fields(
            updated, rate, keep=changes.keys(), default_term=settings.DEFAULT_TERM_MONTHS,
        )
    if seed is not None:
        # Figures typed in this edit win over the estimate.
        fields = {**seed, **changes}
    else:
        fields = {**changes, **_financial_updates(lead, changes)}

    if not fields:
        return MutationResult(lead_id=lead.id, status=MutationStatus.APPLIED)
    return await _persist(store, lead.id, fields, operation="field update", notifier=notifier)


async def set_active_sub_status(
    store: LeadStore,
    lead: LeadSnapshot,
    sub_status: ActiveSubStatus,
    *,
    notifier: NotificationHook | None = None,
) -> MutationResult:
    """Change an Active lead's sub-status and move its section accordingly.

    Raises:
        StageMismatchError: The lead is not in the Active stage.
        StatusChangeBlockedError: The sub-status needs an attachment the lead lacks.
    """
    rule = validate_status_change("loan_status", sub_status.value, lead)
    if rule is not None:
        raise StatusChangeBlockedError(rule, missing_for(rule, lead))
    fields = plan_active_sub_status(lead, sub_status)
    return await _persist(
        store, lead.id, fields, operation=f"sub-status {sub_status.label}", notifier=notifier,
    )


async def set_past_client_status(
    store: LeadStore,
    lead: LeadSnapshot,
    raw_status: str | None,
    *,
    clock: Clock | None = None,
    notifier: NotificationHook | None = None,
) -> MutationResult:
    """Set a past client's status. ``New Lead`` also opens a new lead in the same write.

    Raises:
        StageMismatchError: The lead is not a past client.
    """
    plan = plan_past_client_status(lead, raw_status, today(clock or SystemClock()))
    result = await _persist(
        store,
        lead.id,
        plan.fields,
        operation=f"past client status {plan.status.value}",
        new_leads=[plan.new_lead] if plan.new_lead else None,
        notifier=notifier,
    )
    for created_id in result.created_lead_ids:
        await notify_lead_changed(notifier, created_id)
    return result
