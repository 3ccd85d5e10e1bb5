# This project was developed with assistance from AI tools.
"""Stage transition planning.

Computes the full set of field writes for a stage change, an Active
sub-status change, or a Past Clients status change. Nothing here touches
the store; the coordinator in ``lead.py`` persists the plan in one write.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from db.enums import ActiveSubStatus, PastClientStatus, PipelineSection, PipelineStage

from ..schemas.lead import LeadSnapshot
from .persistence import StageHistoryEntry

logger = logging.getLogger(__name__)

# Entry timestamp written when a lead first reaches each ordered stage.
STAGE_TIMESTAMP_FIELDS: dict[PipelineStage, str] = {
    PipelineStage.PENDING_APP: "pending_app_at",
    PipelineStage.SCREENING: "app_complete_at",
    PipelineStage.PRE_QUALIFIED: "pre_qualified_at",
    PipelineStage.PRE_APPROVED: "pre_approved_at",
    PipelineStage.ACTIVE: "active_at",
}

NEW_LEAD_STATUS = "Working on it"
PENDING_APP_STATUS = "Pending App"
PRE_APPROVED_STATUS = "New"
PAST_CLIENT_REFERRAL = "Past Client"
CLONED_CONTACT_FIELDS = ("first_name", "last_name", "email", "phone")


class StageMismatchError(ValueError):
    """A sub-status change was requested for a lead outside the owning stage."""


@dataclass
class StageMutation:
    """Everything a stage change writes, ready for a single persistence call."""

    lead_id: int
    from_stage: str | None
    to_stage: str
    fields: dict
    history: StageHistoryEntry
    backfilled: list[str] = field(default_factory=list)
    bypassed: bool = False


def _stage_index(key: str | None) -> int | None:
    """Ordered index of ``key``; None when the key is not a known stage."""
    if PipelineStage.from_key(key) is None:
        return None
    return PipelineStage.index_of(key)


def plan_stage_transition(
    lead: LeadSnapshot,
    target_stage: str,
    now: datetime,
    *,
    bypass: bool = False,
    actor: str | None = None,
) -> StageMutation:
    """Plan the writes for moving ``lead`` into ``target_stage``.

    Forward moves backfill the entry timestamp of every stage passed through,
    never overwriting one already set. Lateral and backward moves only move
    the stage pointer. Stage side effects apply on every entry regardless of
    the path taken.
    """
    target = PipelineStage.from_key(target_stage)
    to_key = target.value if target is not None else target_stage
    fields: dict = {"stage": to_key}
    backfilled: list[str] = []

    from_index = _stage_index(lead.stage)
    to_index = _stage_index(target_stage)
    if from_index is None or to_index is None:
        logger.warning(
            "Lead %s: unknown stage key in transition %r -> %r; skipping timestamp backfill",
            lead.id, lead.stage, target_stage,
        )
    elif from_index >= 0 and to_index > from_index:
        for stage in PipelineStage.ordered()[from_index + 1:to_index + 1]:
            ts_field = STAGE_TIMESTAMP_FIELDS.get(stage)
            if ts_field and getattr(lead, ts_field) is None:
                fields[ts_field] = now
                backfilled.append(ts_field)

    if target == PipelineStage.PENDING_APP:
        fields["converted"] = PENDING_APP_STATUS
        fields["task_eta"] = now.date()
    elif target == PipelineStage.PRE_APPROVED:
        fields["converted"] = PRE_APPROVED_STATUS
    elif target == PipelineStage.ACTIVE:
        # Entering Active always restarts the sub-status machine.
        fields["pipeline_section"] = PipelineSection.INCOMING
        fields["loan_status"] = ActiveSubStatus.NEW.value

    return StageMutation(
        lead_id=lead.id,
        from_stage=lead.stage,
        to_stage=to_key,
        fields=fields,
        history=StageHistoryEntry(
            from_stage=lead.stage,
            to_stage=to_key,
            changed_by=actor,
            changed_at=now,
        ),
        backfilled=backfilled,
        bypassed=bypass,
    )


def resolve_active_section(
    current_section: PipelineSection | None,
    sub_status: ActiveSubStatus,
) -> PipelineSection | None:
    """Section implied by an Active sub-status.

    Closed is sticky. NEW and RFP pull the lead into Incoming; SUB, AWC and
    CTC promote it to Live, but only out of Incoming.
    """
    if current_section == PipelineSection.CLOSED:
        return PipelineSection.CLOSED
    if sub_status in (ActiveSubStatus.NEW, ActiveSubStatus.RFP):
        return PipelineSection.INCOMING
    if current_section == PipelineSection.INCOMING:
        return PipelineSection.LIVE
    return current_section


def plan_active_sub_status(lead: LeadSnapshot, sub_status: ActiveSubStatus) -> dict:
    """Fields written when an Active lead's sub-status changes."""
    if PipelineStage.from_key(lead.stage) != PipelineStage.ACTIVE:
        raise StageMismatchError(f"Lead {lead.id} is not in the Active stage")
    return {
        "loan_status": sub_status.value,
        "pipeline_section": resolve_active_section(lead.pipeline_section, sub_status),
    }


def new_lead_defaults(today: date) -> dict:
    """Initial values for a freshly created lead."""
    return {
        "stage": PipelineStage.LEADS.value,
        "converted": NEW_LEAD_STATUS,
        "lead_on_date": today,
        "task_eta": today,
    }


@dataclass
class PastClientPlan:
    status: PastClientStatus
    fields: dict
    new_lead: dict | None = None


def plan_past_client_status(lead: LeadSnapshot, raw_status: str | None, today: date) -> PastClientPlan:
    """Plan a Past Clients status change.

    ``New Lead`` also yields a brand-new lead cloned from the client's
    contact details, referred by "Past Client".
    """
    if PipelineStage.from_key(lead.stage) != PipelineStage.PAST_CLIENTS:
        raise StageMismatchError(f"Lead {lead.id} is not a past client")

    status = PastClientStatus.from_raw(raw_status)
    plan = PastClientPlan(status=status, fields={"loan_status": status.value})
    if status == PastClientStatus.NEW_LEAD:
        new_lead = new_lead_defaults(today)
        new_lead.update({name: getattr(lead, name) for name in CLONED_CONTACT_FIELDS})
        new_lead["referral_source"] = PAST_CLIENT_REFERRAL
        plan.new_lead = new_lead
    return plan
