# This project was developed with assistance from AI tools.
"""Stage and milestone status gating rules.

Decides whether a lead may enter a pipeline stage, or whether a milestone
status field may take a value, given what is currently on the lead. Pure:
no I/O, no logging of deficiencies (they are expected, user-actionable
outcomes, not errors).
"""

from dataclasses import dataclass, field

from db.enums import PipelineStage, TransactionType

from ..schemas.lead import LeadSnapshot

# Fields a user may correct inline while resolving a stage deficiency.
CORRECTABLE_FIELDS = frozenset({"lead_strength", "likely_to_apply"})


@dataclass(frozen=True)
class StageRule:
    """Fields required before a lead may enter ``stage``.

    When ``bypass_field`` holds one of ``bypass_values`` on the lead, the
    required fields are waived.
    """

    stage: PipelineStage
    required_fields: tuple[str, ...]
    message: str
    action_label: str
    bypass_field: str | None = None
    bypass_values: frozenset[str] = frozenset()

    def bypass_applies(self, lead: LeadSnapshot) -> bool:
        if self.bypass_field is None:
            return False
        value = getattr(lead, self.bypass_field, None)
        if value is None:
            return False
        return str(getattr(value, "value", value)) in self.bypass_values


STAGE_RULES: dict[PipelineStage, StageRule] = {
    PipelineStage.PENDING_APP: StageRule(
        stage=PipelineStage.PENDING_APP,
        required_fields=("lead_strength", "likely_to_apply"),
        message="Please update Lead Strength and Likely to Apply before moving to Pending App",
        action_label="Update Lead Details",
    ),
    PipelineStage.ACTIVE: StageRule(
        stage=PipelineStage.ACTIVE,
        required_fields=("contract_file",),
        message="Please upload a contract before moving to Active pipeline",
        action_label="Upload Contract",
        bypass_field="pr_type",
        bypass_values=frozenset({TransactionType.REFINANCE.value, TransactionType.HELOC.value}),
    ),
}


@dataclass
class StageValidation:
    """Outcome of a stage gate check.

    ``approved`` is False when required fields are missing. ``bypass_available``
    is True when the lead's own data waives the rule's required fields;
    ``bypassed_fields`` lists the ones that were actually empty.
    """

    target_stage: str
    approved: bool
    rule: StageRule | None = None
    missing_fields: list[str] = field(default_factory=list)
    bypass_available: bool = False
    bypassed_fields: list[str] = field(default_factory=list)

    @property
    def message(self) -> str | None:
        return self.rule.message if self.rule else None


def _is_present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def apply_corrections(lead: LeadSnapshot, corrected_fields: dict | None) -> LeadSnapshot:
    """Overlay inline corrections on the snapshot.

    Raises:
        ValueError: A correction names a field outside ``CORRECTABLE_FIELDS``.
    """
    if not corrected_fields:
        return lead
    unexpected = set(corrected_fields) - CORRECTABLE_FIELDS
    if unexpected:
        raise ValueError(f"Fields cannot be corrected inline: {', '.join(sorted(unexpected))}")
    return lead.with_fields(corrected_fields)


def validate_stage_transition(
    lead: LeadSnapshot,
    target_stage: str,
    corrected_fields: dict | None = None,
) -> StageValidation:
    """Check whether ``lead`` may enter ``target_stage``.

    Stages without a rule (including unknown keys) are always approved; the
    transition engine deals with unknown keys on its own terms.
    """
    lead = apply_corrections(lead, corrected_fields)
    stage = PipelineStage.from_key(target_stage)
    rule = STAGE_RULES.get(stage) if stage is not None else None
    if rule is None:
        return StageValidation(target_stage=target_stage, approved=True)

    missing = [name for name in rule.required_fields if not _is_present(getattr(lead, name, None))]
    bypass_available = rule.bypass_applies(lead)
    bypassed: list[str] = []
    if bypass_available:
        # The predicate waives every required field of the rule.
        bypassed, missing = missing, []

    return StageValidation(
        target_stage=target_stage,
        approved=not missing,
        rule=rule,
        missing_fields=missing,
        bypass_available=bypass_available,
        bypassed_fields=bypassed,
    )


# -- Milestone status rules --


@dataclass(frozen=True)
class FieldStatusRule:
    """Fields that must be populated before ``field`` may be set to ``value``."""

    field: str
    value: str
    requires: tuple[str, ...]
    message: str
    action_label: str
    action_type: str = "upload_file"


def _rules(*rules: FieldStatusRule) -> dict[tuple[str, str], FieldStatusRule]:
    return {(r.field, r.value): r for r in rules}


FIELD_STATUS_RULES: dict[tuple[str, str], FieldStatusRule] = _rules(
    FieldStatusRule(
        "disclosure_status", "Ordered", ("disc_file",),
        "You must upload a Disclosure document before setting status to Ordered",
        "Upload Disclosure Package",
    ),
    FieldStatusRule(
        "disclosure_status", "Sent", ("disc_file",),
        "You must upload a Disclosure document before setting status to Sent",
        "Upload Disclosure Package",
    ),
    FieldStatusRule(
        "disclosure_status", "Signed", ("disc_file",),
        "Upload the signed disclosures to change status to Signed",
        "Upload Signed Disclosures",
    ),
    FieldStatusRule(
        "loan_status", "AWC", ("initial_approval_file",),
        "Upload the initial approval to change status to AWC",
        "Upload Initial Approval",
    ),
    FieldStatusRule(
        "appraisal_status", "Scheduled", ("appr_date_time",),
        "Set the appraisal date/time to change status to Scheduled",
        "Set Appraisal Date/Time",
        action_type="set_field",
    ),
    FieldStatusRule(
        "appraisal_status", "Received", ("appraisal_file",),
        "Upload the appraisal report to change status to Received",
        "Upload Appraisal Report",
    ),
    FieldStatusRule(
        "title_status", "Ordered", ("title_eta",),
        "Enter a Title ETA before setting status to Ordered",
        "Set Title ETA",
        action_type="set_field",
    ),
    FieldStatusRule(
        "title_status", "Received", ("title_file",),
        "Upload the title work to change status to Received",
        "Upload Title File",
    ),
    FieldStatusRule(
        "hoi_status", "Received", ("insurance_policy_file",),
        "Upload the HOI policy to change status to Received",
        "Upload HOI Policy",
    ),
    FieldStatusRule(
        "insurance_status", "Received", ("insurance_file",),
        "Upload the HOI policy to change status to Received",
        "Upload HOI Policy",
    ),
    FieldStatusRule(
        "package_status", "Final", ("fcp_file",),
        "Upload the final closing package to change status to Final",
        "Upload Final Closing Package",
    ),
    FieldStatusRule(
        "condo_status", "Ordered", ("condo_ordered_date", "condo_eta"),
        "Enter Order Date and ETA before setting status to Ordered",
        "Set Order Details",
        action_type="set_field",
    ),
    FieldStatusRule(
        "condo_status", "Approved", ("condo_file",),
        "Upload condo documents to change status to Approved",
        "Upload Condo Documents",
    ),
)


class StatusChangeBlockedError(ValueError):
    """A milestone status value was set without its supporting data."""

    def __init__(self, rule: FieldStatusRule, missing_fields: list[str]):
        self.rule = rule
        self.missing_fields = missing_fields
        super().__init__(rule.message)


def validate_status_change(field_name: str, value, lead: LeadSnapshot) -> FieldStatusRule | None:
    """Return the violated rule, or None when the change is allowed."""
    rule = FIELD_STATUS_RULES.get((field_name, str(getattr(value, "value", value))))
    if rule is None:
        return None
    if all(_is_present(getattr(lead, name, None)) for name in rule.requires):
        return None
    return rule


def missing_for(rule: FieldStatusRule, lead: LeadSnapshot) -> list[str]:
    return [name for name in rule.requires if not _is_present(getattr(lead, name, None))]
